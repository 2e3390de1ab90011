from __future__ import annotations
import re

# Pre-compiled for the download loop
_FILENAME_INVALID_CHARS = re.compile(r'[\\/:*?"<>\|\r\n\t]+')


def sanitize_filename(name: str, max_len: int = 180) -> str:
    """Clean a file name, replacing characters that are invalid on Windows or Unix.

    Args:
        name: Original name
        max_len: Maximum length (default=180)

    Returns:
        A name that is safe to join under a folder

    Examples:
        >>> sanitize_filename("../evil/name")
        '.._evil_name'
        >>> sanitize_filename("", max_len=50)
        'out'
    """
    if not name:
        return "out"

    cleaned = _FILENAME_INVALID_CHARS.sub("_", name)
    cleaned = cleaned.strip("_ ")

    if len(cleaned) > max_len:
        cleaned = cleaned[:max_len].rstrip("_ ")

    # "." and ".." would resolve outside the target file
    if cleaned in ("", ".", ".."):
        return "out"
    return cleaned


def split_tokens(raw: str | None) -> list[str]:
    """Split a comma and/or whitespace separated list, dropping empty items."""
    if not raw:
        return []
    return [t for t in re.split(r"[,\s]+", raw.strip()) if t]
