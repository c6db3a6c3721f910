"""
Brat pipeline.

Renders text on bratgenerator.com and re-hosts the screenshot, returning
its public URL.
"""

import logging

from ..util.renderer import render_brat
from ..util.uploader import random_name, upload_file

logger = logging.getLogger(__name__)


async def generate_brat(text: str) -> str:
    """Render ``text`` as a brat image and return the uploaded file's URL."""
    logger.info("[Pipeline:brat] Rendering %d chars", len(text))

    image = await render_brat(text)
    url = await upload_file(image, random_name(".jpg"))

    logger.info("[Pipeline:brat] Done: %s", url)
    return url
