"""
Utility functions: Playwright renderer, yt-dlp audio fetcher and uploader.
"""

from .renderer import render_brat
from .uploader import random_name, upload_file
from .youtube import fetch_audio

__all__ = [
    "render_brat",
    "fetch_audio",
    "random_name",
    "upload_file",
]
