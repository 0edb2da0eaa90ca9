"""Object identifiers: file ids, heading slugs, and per-document allocation.

Identifier grammar:
- Root object: the vault-relative path without its file extension.
- Nested object: ``<root id>#<local id>``, where the local id is either
  declared (``::type(id=...)``) or a collision-disambiguated heading slug.

INVARIANT: Within one document no two objects share an identifier.
"""

from __future__ import annotations

import re
import unicodedata
from collections import Counter
from collections.abc import Iterable
from enum import StrEnum
from pathlib import PurePosixPath

from ravenmd.domain.errors import ParseError, ParseErrorCode

_SLUG_SEPARATORS = frozenset(" -_:")


class DuplicateIdPolicy(StrEnum):
    """What to do when two type declarations in one file use the same id."""

    ERROR = "error"
    DISAMBIGUATE = "disambiguate"


def heading_slug(text: str) -> str:
    """Convert heading text into a URL/identifier-safe slug.

    Lowercases, applies NFKC normalization, keeps letters and digits,
    turns runs of space, ``-``, ``_`` and ``:`` into a single dash, and
    drops everything else. May return an empty string.

    Examples:
        >>> heading_slug("Weekly Standup: Q1")
        'weekly-standup-q1'
        >>> heading_slug("!!!")
        ''
    """
    normalized = unicodedata.normalize("NFKC", text).lower()
    out: list[str] = []
    for ch in normalized:
        if ch.isalnum():
            out.append(ch)
        elif ch in _SLUG_SEPARATORS and out and out[-1] != "-":
            out.append("-")
    return "".join(out).rstrip("-")


def normalize_dir_root(root: str) -> str:
    """Normalize a directory root to ``name/`` form (empty stays empty)."""
    root = root.replace("\\", "/").strip("/")
    return f"{root}/" if root else ""


def normalize_relative_path(path: str) -> str:
    """Use ``/`` separators and drop leading ``./``, ``/`` and doubled slashes."""
    path = path.replace("\\", "/")
    path = path.removeprefix("./").lstrip("/")
    return re.sub(r"/{2,}", "/", path)


def file_id_from_path(
    relative_path: str,
    *,
    objects_root: str = "",
    pages_root: str = "",
) -> str:
    """Derive the root object id from a vault-relative file path.

    Strips the file extension and, when configured, a leading objects or
    pages directory root (objects root first).

    Examples:
        >>> file_id_from_path("people/alice.md")
        'people/alice'
        >>> file_id_from_path("objects/people/alice.md", objects_root="objects")
        'people/alice'
    """
    path = normalize_relative_path(relative_path)
    suffix = PurePosixPath(path).suffix
    if suffix:
        path = path[: -len(suffix)]

    for root in (normalize_dir_root(objects_root), normalize_dir_root(pages_root)):
        if root and path.startswith(root):
            return path[len(root) :]
    return path


def nested_id(file_id: str, local_id: str) -> str:
    return f"{file_id}#{local_id}"


class IdAllocator:
    """Hands out unique local ids for one document.

    Derived ids (heading slugs) share a counter per base slug: the first
    use keeps the bare slug, later uses get ``-2``, ``-3``, ... in order of
    appearance. Declared ids passed in *reserved* are never produced by
    :meth:`derive`, whatever order the headings appear in.
    """

    def __init__(
        self,
        *,
        reserved: Iterable[str] = (),
        policy: DuplicateIdPolicy = DuplicateIdPolicy.ERROR,
    ) -> None:
        self._reserved = frozenset(reserved)
        self._policy = policy
        self._counts: Counter[str] = Counter()
        self._taken: set[str] = set()

    def derive(self, base: str) -> str:
        """Return a fresh id derived from *base*."""
        self._counts[base] += 1
        candidate = base if self._counts[base] == 1 else f"{base}-{self._counts[base]}"
        while candidate in self._taken or candidate in self._reserved:
            self._counts[base] += 1
            candidate = f"{base}-{self._counts[base]}"
        self._taken.add(candidate)
        return candidate

    def claim(self, declared: str, *, line: int | None = None) -> str:
        """Register an explicitly declared id.

        Raises:
            ParseError: If *declared* was already claimed and the policy is
                :attr:`DuplicateIdPolicy.ERROR`.
        """
        if declared not in self._taken:
            self._taken.add(declared)
            return declared
        if self._policy is DuplicateIdPolicy.DISAMBIGUATE:
            return self.derive(declared)
        msg = f"Duplicate object id {declared!r}"
        raise ParseError(ParseErrorCode.DUPLICATE_ID, msg, line=line)
