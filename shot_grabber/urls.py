from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional
from urllib.parse import urlsplit

from shot_grabber.console import RunLogger
from shot_grabber.errors import NoValidUrlsError, ShotGrabberError

# characters that are not allowed in a directory name on at least one platform
ILLEGAL_PATH_CHARS = '\\:*?"<>|'


def is_valid_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


def parse_urls(lines: Iterable[str], logger: Optional[RunLogger] = None) -> list[str]:
    """Deduplicate and validate raw url lines, keeping first occurrences in order."""
    seen = set()
    urls = []
    for line in lines:
        url = line.strip()
        if not url or url in seen:
            continue
        seen.add(url)
        if not is_valid_url(url):
            if logger:
                logger.log(f'Removing invalid URL: "{url}"', verbose=True)
            continue
        urls.append(url)

    if not urls:
        raise NoValidUrlsError("No valid urls found.")
    return urls


def load_urls(path: Path, logger: Optional[RunLogger] = None) -> list[str]:
    path = Path(path)
    if not path.exists():
        raise ShotGrabberError(f"The file {path} does not exist.")
    return parse_urls(path.read_text(encoding="utf-8").splitlines(), logger)


def url_to_directory_name(url: str, include_host: bool = True) -> str:
    """Turn a url into a single, filesystem safe directory name.

    With `include_host=False` only the path, query and fragment are kept so
    that two environments serving the same paths produce the same names.
    """
    if include_host:
        name = url.replace("://", "-")
    else:
        parts = urlsplit(url)
        name = parts.path or "/"
        if parts.query:
            name += f"?{parts.query}"
        if parts.fragment:
            name += f"#{parts.fragment}"

    name = name.replace("%", "%25").replace("/", "%2F")
    for char in ILLEGAL_PATH_CHARS:
        name = name.replace(char, f"%{ord(char):02X}")
    return name


def run_directory_name(now: Optional[datetime] = None) -> str:
    """Local timestamp usable as a directory name, e.g. 20240131-154502."""
    now = now or datetime.now()
    return now.strftime("%Y%m%d-%H%M%S")
