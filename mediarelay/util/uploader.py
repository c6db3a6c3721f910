"""
Byte upload + URL generation.

Pushes an in-memory buffer to the public file host (tmpfiles.org by default)
as a single multipart request and returns the public URL it reports.
No retry, no chunking.
"""

import logging
import secrets
import string
from dataclasses import dataclass

import httpx

from ..config import get_settings
from ..errors import UploadError

logger = logging.getLogger(__name__)

_NAME_ALPHABET = string.ascii_lowercase + string.digits
_NAME_LENGTH = 16


def random_name(suffix: str = "") -> str:
    """Random alphanumeric file name, e.g. ``random_name(".jpg")``."""
    token = "".join(secrets.choice(_NAME_ALPHABET) for _ in range(_NAME_LENGTH))
    return token + suffix


@dataclass
class UploadRequest:
    """One buffer bound for the file host."""
    payload: bytes
    file_name: str

    def __post_init__(self):
        if not self.payload:
            raise UploadError(f"Refusing to upload empty payload ({self.file_name})")


async def upload_file(
    payload: bytes,
    file_name: str,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Upload a byte buffer and return its public URL.

    Args:
        payload: File content, must be non-empty.
        file_name: Name reported to the host; the extension decides how it
                   is served.
        client: Optional shared AsyncClient. When omitted a client is created
                and closed for this single call.

    Raises:
        UploadError: the host reported a non-success status, or the request
                     failed at transport level.
    """
    request = UploadRequest(payload=payload, file_name=file_name)
    settings = get_settings()

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=settings.http_timeout)

    try:
        files = {"file": (request.file_name, request.payload)}
        resp = await client.post(settings.upload_url, files=files)
        resp.raise_for_status()
        body = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("[uploader] Upload of %s failed: %s", request.file_name, e)
        raise UploadError(f"Failed to upload to tmpfiles.org: {e}") from e
    finally:
        if own_client:
            await client.aclose()

    if not isinstance(body, dict):
        raise UploadError(f"Upload failed: unexpected response {body!r}")
    if body.get("status") != "success":
        raise UploadError(f"Upload failed: {body.get('message', 'unknown error')}")

    url = (body.get("data") or {}).get("url")
    if not url:
        raise UploadError("Upload failed: response carried no URL")
    logger.info("[uploader] Uploaded %s (%d bytes) -> %s", request.file_name, len(request.payload), url)
    return url
