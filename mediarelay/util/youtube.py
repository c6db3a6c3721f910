"""
YouTube audio resolution via yt-dlp.

Turns a YouTube URL or a free-text query into the best audio-only stream,
downloaded fully into memory, plus the metadata the /ytmp3 endpoint reports.

yt-dlp is synchronous; its calls are pushed to the threadpool so the event
loop stays free. The stream itself is fetched with httpx.
"""

import logging
import re
from dataclasses import dataclass
from urllib.parse import parse_qs, urlparse

import httpx
import yt_dlp
from starlette.concurrency import run_in_threadpool

from ..config import get_settings
from ..errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

VIDEO_NOT_FOUND = "Video tidak ditemukan."

_VALID_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "gaming.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}
_SHORT_HOST = "youtu.be"
_PATH_PREFIXES = ("embed", "e", "v", "shorts", "live")
_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

_MIB = 1048576


@dataclass
class AudioTrack:
    """Downloaded audio plus its display metadata."""
    payload: bytes
    title: str
    thumbnail: str | None
    size: str


def get_video_id(url: str) -> str | None:
    """Return the 11-char video id of a YouTube URL, or None if it is not one."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https"):
        return None

    host = (parsed.hostname or "").lower()
    segments = [s for s in parsed.path.split("/") if s]

    candidate = None
    if host == _SHORT_HOST:
        candidate = segments[0] if segments else None
    elif host in _VALID_HOSTS:
        candidate = parse_qs(parsed.query).get("v", [None])[0]
        if candidate is None and len(segments) >= 2 and segments[0] in _PATH_PREFIXES:
            candidate = segments[1]

    if candidate and _VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def is_youtube_url(url: str) -> bool:
    return get_video_id(url) is not None


def _ydl_opts(**extra) -> dict:
    opts = {
        "quiet": True,
        "no_warnings": True,
        "noplaylist": True,
    }
    proxy = get_settings().ytdlp_proxy
    if proxy:
        opts["proxy"] = proxy
    opts.update(extra)
    return opts


def search_first(query: str) -> str:
    """
    Search YouTube and return the URL of the top hit.

    Raises:
        NotFoundError: the search returned nothing.
    """
    with yt_dlp.YoutubeDL(_ydl_opts(extract_flat=True)) as ydl:
        info = ydl.extract_info(f"ytsearch1:{query}", download=False)

    for entry in (info or {}).get("entries") or []:
        if not entry:
            continue
        url = entry.get("url") or entry.get("webpage_url")
        if not url and entry.get("id"):
            url = f"https://www.youtube.com/watch?v={entry['id']}"
        if url:
            logger.info("[youtube] Search %r -> %s", query, url)
            return url

    logger.info("[youtube] Search %r returned no results", query)
    raise NotFoundError(VIDEO_NOT_FOUND)


def fetch_info(url: str) -> dict:
    """Full yt-dlp metadata for a single video (no download)."""
    with yt_dlp.YoutubeDL(_ydl_opts()) as ydl:
        return ydl.extract_info(url, download=False)


def pick_audio_format(formats: list[dict]) -> dict:
    """Highest-bitrate audio-only format."""
    audio_only = [
        f for f in formats or []
        if f.get("vcodec") == "none" and f.get("acodec") not in (None, "none")
    ]
    if not audio_only:
        raise UpstreamError("No such format found: audioonly")
    return max(
        audio_only,
        key=lambda f: (f.get("abr") or 0, f.get("tbr") or 0, f.get("quality") or 0),
    )


def pick_thumbnail(info: dict) -> str | None:
    """Last listed thumbnail (yt-dlp orders them worst to best)."""
    thumbnails = info.get("thumbnails") or []
    for thumb in reversed(thumbnails):
        if thumb.get("url"):
            return thumb["url"]
    return info.get("thumbnail")


def format_size(num_bytes: int | float) -> str:
    return f"{num_bytes / _MIB:.2f} MB"


async def _fetch(client: httpx.AsyncClient, url: str, headers: dict) -> tuple[int, bytes]:
    chunks: list[bytes] = []
    async with client.stream("GET", url, headers=headers) as resp:
        resp.raise_for_status()
        async for chunk in resp.aiter_bytes():
            chunks.append(chunk)
    return resp.status_code, b"".join(chunks)


async def download_format(fmt: dict, client: httpx.AsyncClient | None = None) -> bytes:
    """
    Stream a resolved format URL into memory.

    When yt-dlp asks for chunked downloading (``downloader_options.http_chunk_size``,
    set for YouTube which throttles long unranged reads) the file is fetched
    as consecutive ``Range`` requests of that size. Otherwise one GET.
    """
    url = fmt.get("url")
    if not url:
        raise UpstreamError(f"Format {fmt.get('format_id')} has no stream URL")

    headers = dict(fmt.get("http_headers") or {})
    chunk_size = (fmt.get("downloader_options") or {}).get("http_chunk_size")
    total = fmt.get("filesize")

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=get_settings().http_timeout, follow_redirects=True)

    try:
        if not chunk_size:
            _, payload = await _fetch(client, url, headers)
            return payload

        parts: list[bytes] = []
        start = 0
        while True:
            end = start + chunk_size - 1
            if total:
                end = min(end, total - 1)
            requested = end - start + 1
            try:
                status, part = await _fetch(client, url, {**headers, "Range": f"bytes={start}-{end}"})
            except httpx.HTTPStatusError as e:
                # Unknown size and an exact multiple of chunk_size: past the end.
                if e.response.status_code == 416 and parts:
                    break
                raise
            if status != 206:
                # Server ignored Range and sent the whole file.
                return part
            parts.append(part)
            start += len(part)
            # A short read means the end of the file was reached.
            if len(part) < requested or (total and start >= total):
                break
        logger.debug("[youtube] Downloaded %d bytes in %d ranged requests", start, len(parts))
        return b"".join(parts)
    except httpx.HTTPError as e:
        raise UpstreamError(f"Audio download failed: {e}") from e
    finally:
        if own_client:
            await client.aclose()


async def fetch_audio(query: str, client: httpx.AsyncClient | None = None) -> AudioTrack:
    """
    Resolve ``query`` to a video and download its best audio stream.

    Args:
        query: A YouTube URL, or free text searched on YouTube.
        client: Optional AsyncClient for the stream download.

    Raises:
        NotFoundError: the search yielded no video.
        UpstreamError: yt-dlp or the stream download failed.
    """
    if is_youtube_url(query):
        video_url = query
    else:
        try:
            video_url = await run_in_threadpool(search_first, query)
        except yt_dlp.utils.YoutubeDLError as e:
            raise UpstreamError(str(e)) from e

    try:
        info = await run_in_threadpool(fetch_info, video_url)
    except yt_dlp.utils.YoutubeDLError as e:
        raise UpstreamError(str(e)) from e

    fmt = pick_audio_format(info.get("formats"))
    content_length = fmt.get("filesize") or fmt.get("filesize_approx")
    logger.info(
        "[youtube] %s: format=%s abr=%s size=%s",
        video_url, fmt.get("format_id"), fmt.get("abr"), content_length,
    )

    payload = await download_format(fmt, client=client)
    if not payload:
        raise UpstreamError("Audio download returned no data")

    return AudioTrack(
        payload=payload,
        title=info.get("title") or "",
        thumbnail=pick_thumbnail(info),
        size=format_size(content_length or len(payload)),
    )
