"""
YouTube audio pipeline.

Resolves a URL or search query to a video, downloads its best audio stream
into memory and re-hosts it.
"""

import logging

from ..util.uploader import random_name, upload_file
from ..util.youtube import fetch_audio

logger = logging.getLogger(__name__)


async def generate_ytmp3(query: str) -> dict:
    """
    Fetch and re-host audio for ``query``.

    Returns:
        dict with {title, thumbnail, audio_url, size}.
    """
    logger.info("[Pipeline:ytmp3] Query: %s", query)

    track = await fetch_audio(query)
    audio_url = await upload_file(track.payload, random_name(".mp3"))

    result = {
        "title": track.title,
        "thumbnail": track.thumbnail,
        "audio_url": audio_url,
        "size": track.size,
    }
    logger.info("[Pipeline:ytmp3] Done: %s (%s, %s)", track.title, track.size, audio_url)
    return result
