"""
Endpoint pipelines: produce bytes, upload them, shape the result.
"""

from .brat import generate_brat
from .ytmp3 import generate_ytmp3

__all__ = [
    "generate_brat",
    "generate_ytmp3",
]
