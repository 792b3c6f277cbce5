# File: localgov/services/filenames.py
import os
from typing import Container, Iterable

# Bytes, not characters: NAME_MAX on Linux counts the UTF-8 encoding.
MAX_FILENAME_LENGTH = 255

# Union of what Windows and POSIX refuse in a file name, so stored names survive
# a copy to any of them.
INVALID_FILENAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(c) for c in range(32))


def _split_name(name: str) -> tuple[str, str]:
    return os.path.splitext(name)


def _is_invalid(c: str) -> bool:
    # lone surrogates cannot be encoded to a file name
    return c in INVALID_FILENAME_CHARS or "\ud800" <= c <= "\udfff"


def _fit_base(base: str, tail: str) -> str:
    """Trim ``base`` from the right so ``base + tail`` fits MAX_FILENAME_LENGTH bytes.

    ``tail`` (suffix and extension) is never cut; at least one character of the
    base is kept even when the tail alone is too long.
    """
    budget = MAX_FILENAME_LENGTH - len(tail.encode("utf-8"))
    encoded = base.encode("utf-8")
    if len(encoded) <= budget:
        return base
    # "ignore" drops a multi-byte character split by the cut
    trimmed = encoded[: max(budget, 0)].decode("utf-8", "ignore")
    return trimmed or base[:1]


def sanitize_filename(raw_name: str | None) -> str:
    """Turn an untrusted client file name into a safe on-disk base name.

    Directory components are dropped, characters outside the portable file name
    set become ``_`` and the base is trimmed from the right so that base plus
    extension fit in 255 bytes (the extension is always kept whole).
    Returns ``""`` when nothing usable is left; callers reject the file then.
    """
    raw = (raw_name or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
    if not raw:
        return ""

    cleaned = "".join("_" if _is_invalid(c) else c for c in raw)
    base, ext = _split_name(cleaned)
    name = (_fit_base(base, ext) + ext).strip()

    # "." and ".." are never files
    if not name or not name.strip("."):
        return ""
    return name


def uniquify_filename(used: Container[str], candidate: str) -> str:
    """Return ``candidate`` or its first free ``name (n).ext`` form.

    The base is shortened as needed so every suffixed form stays within
    MAX_FILENAME_LENGTH. Pure: the caller is responsible for recording the
    returned name in ``used``.
    """
    if candidate not in used:
        return candidate
    base, ext = _split_name(candidate)
    attempt = 1
    while True:
        tail = f" ({attempt}){ext}"
        suffixed = _fit_base(base, tail) + tail
        if suffixed not in used:
            return suffixed
        attempt += 1


class NameRegistry:
    """Case-insensitive set of file names already taken in one destination directory.

    Only touched by the sequential planning phase, never by upload workers.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._keys: set[str] = set()
        for name in names:
            self.add(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def add(self, name: str) -> None:
        self._keys.add(name.casefold())

    def claim(self, candidate: str) -> str:
        """Uniquify ``candidate`` against the registry and reserve the result."""
        final = uniquify_filename(self, candidate)
        self.add(final)
        return final
