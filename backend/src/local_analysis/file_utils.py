"""Path helpers for git file listings."""
from __future__ import annotations

from pathlib import Path
import re
from typing import Optional, Set, Union

_BINARY_EXTENSIONS: Set[str] = {
    # images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp", ".tif", ".tiff",
    ".psd", ".heic", ".avif",
    # archives
    ".zip", ".tar", ".gz", ".tgz", ".bz2", ".xz", ".7z", ".rar", ".jar", ".war",
    # fonts
    ".ttf", ".otf", ".woff", ".woff2", ".eot",
    # audio / video
    ".mp3", ".wav", ".ogg", ".flac", ".mp4", ".mov", ".avi", ".mkv", ".webm",
    # documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt",
    # compiled artifacts
    ".exe", ".dll", ".so", ".dylib", ".o", ".a", ".class", ".pyc", ".pyo",
    ".wasm", ".bin", ".dat", ".db", ".sqlite", ".sqlite3",
}

_SNIFF_BYTES = 8000

_C_ESCAPES = {
    "a": b"\a", "b": b"\b", "f": b"\f", "n": b"\n", "r": b"\r", "t": b"\t", "v": b"\v",
    "\\": b"\\", '"': b'"',
}
_OCTAL_ESCAPE = re.compile(r"[0-7]{3}")


def is_quoted(path: str) -> bool:
    return len(path) >= 2 and path.startswith('"') and path.endswith('"')


def unquote_git_path(quoted: str) -> str:
    """Decode a C-quoted name as git prints it, e.g. ``"caf\\303\\251.txt"``.

    Octal escapes are the raw bytes of the UTF-8 encoded name.
    """
    body = quoted[1:-1] if is_quoted(quoted) else quoted
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\" or i + 1 >= len(body):
            out += ch.encode("utf-8")
            i += 1
            continue
        if _OCTAL_ESCAPE.match(body, i + 1):
            out.append(int(body[i + 1:i + 4], 8) & 0xFF)
            i += 4
        else:
            nxt = body[i + 1]
            out += _C_ESCAPES.get(nxt, nxt.encode("utf-8"))
            i += 2
    return out.decode("utf-8", errors="replace")


def normalize_path(raw: str) -> str:
    """Canonicalize one line of ``git ls-files`` output.

    Returns an empty string for blank lines so callers can filter them out.
    """
    path = raw.strip()
    if not path:
        return ""
    # git C-quotes names with non-ASCII or control characters
    if is_quoted(path):
        path = unquote_git_path(path)
    else:
        path = path.replace("\\", "/")
    path = re.sub(r"/{2,}", "/", path)
    while path.startswith("./"):
        path = path[2:]
    return path


def is_binary_file(path: str, root: Optional[Union[str, Path]] = None) -> bool:
    """Classify ``path`` as binary by extension, then by content when possible.

    Args:
        path: Repository-relative path
        root: Working copy root; when given and the extension is not
            conclusive, the file's leading bytes are checked for NUL

    Returns:
        True when line-level diff statistics are not meaningful for the file
    """
    if Path(path).suffix.lower() in _BINARY_EXTENSIONS:
        return True
    if root is None:
        return False

    full_path = Path(root) / path
    if not full_path.is_file():
        return False
    try:
        with full_path.open("rb") as fh:
            chunk = fh.read(_SNIFF_BYTES)
    except OSError:
        return False
    return b"\x00" in chunk
