from pathlib import Path
from typing import Optional

SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB']

# Declared upload MIME type -> canonical extension
MIME_TYPE_EXTENSIONS = {
    'application/pdf': '.pdf',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document': '.docx',
    'application/vnd.openxmlformats-officedocument.presentationml.presentation': '.pptx',
    'image/jpeg': '.jpg',
    'image/png': '.png',
}

ALLOWED_MIME_TYPES = tuple(MIME_TYPE_EXTENSIONS)


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count for display

    Uses 1024-based tiers (Bytes, KB, MB, GB) and two decimal places with
    trailing zeros removed, e.g. 1536 -> "1.5 KB".
    """
    if size_bytes == 0:
        return "0 Bytes"

    k = 1024
    tier = 0
    while tier < len(SIZE_UNITS) - 1 and size_bytes >= k ** (tier + 1):
        tier += 1

    value = f"{size_bytes / k ** tier:.2f}".rstrip('0').rstrip('.')
    return f"{value} {SIZE_UNITS[tier]}"


def is_bare_filename(name: Optional[str]) -> bool:
    """Check that a client supplied token names a file directly inside a directory"""
    if not name or name in ('.', '..'):
        return False
    if any(sep in name for sep in ('/', '\\', '\x00')):
        return False
    return Path(name).name == name


def clamp_quality(quality: Optional[int], default: int = 80, low: int = 20, high: int = 100) -> int:
    if quality is None:
        return default
    return max(low, min(high, int(quality)))
