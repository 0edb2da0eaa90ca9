"""Reference resolution against a known set of object ids.

Parsing leaves reference targets raw. A :class:`Resolver` built from the
ids of every parsed document maps a raw target to a concrete object id,
or reports it as unresolved or ambiguous.

Resolution order:
1. Aliases (exact, then slugified).
2. Date targets (``YYYY-MM-DD``) -> ``<daily_dir>/<date>``.
3. Path-like targets (containing ``/`` or ``#``): exact id, ``.md``
   stripped, slugified path, then ``/<target>`` suffix match.
4. Short names: last path component, exact then slugified.

When several ids match, a file wins over sections of that same file.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from ravenmd.domain.ids import heading_slug
from ravenmd.domain.links import short_name, split_embedded_ref
from ravenmd.domain.values import is_date_string

DEFAULT_DAILY_DIR = "daily"


class MatchSource(StrEnum):
    ALIAS = "alias"
    DATE = "date"
    OBJECT_ID = "object_id"
    SUFFIX = "suffix_match"
    SHORT_NAME = "short_name"


@dataclass(frozen=True)
class ResolveResult:
    """Outcome of resolving one raw target."""

    target_id: str | None = None
    matches: list[str] = field(default_factory=list)
    sources: dict[str, MatchSource] = field(default_factory=dict)

    @property
    def resolved(self) -> bool:
        return self.target_id is not None

    @property
    def ambiguous(self) -> bool:
        return len(self.matches) > 1


@dataclass(frozen=True)
class IdCollision:
    """Object ids from different files sharing one short name."""

    short_name: str
    object_ids: list[str]


# ---------------------------------------------------------------------------
# Slug helpers
# ---------------------------------------------------------------------------


def component_slug(text: str) -> str:
    """Slugify one path component, stripping a trailing ``.md``."""
    text = text.removesuffix(".md")
    return heading_slug(text) or text.replace(" ", "-").lower()


def path_slug(path: str) -> str:
    """Slugify each ``/`` component, and both sides of a ``#`` fragment.

    Examples:
        >>> path_slug("daily/2025-02-01#Team Sync")
        'daily/2025-02-01#team-sync'
    """
    parts: list[str] = []
    for part in path.removesuffix(".md").split("/"):
        if "#" in part:
            file_part, _, fragment = part.partition("#")
            parts.append(f"{component_slug(file_part)}#{component_slug(fragment)}")
        else:
            parts.append(component_slug(part))
    return "/".join(parts)


def _is_path_like(ref: str) -> bool:
    return "/" in ref or "#" in ref


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class _Matches:
    """Ordered, de-duplicated match collector."""

    def __init__(self) -> None:
        self.ids: list[str] = []
        self.sources: dict[str, MatchSource] = {}

    def add(self, object_id: str, source: MatchSource) -> None:
        if object_id and object_id not in self.sources:
            self.ids.append(object_id)
            self.sources[object_id] = source


class Resolver:
    """Resolve raw reference targets to object ids.

    Args:
        object_ids: Every known object id (roots and nested objects).
        daily_dir: Directory holding daily notes, for date targets.
        aliases: Optional ``alias -> object id`` mapping.
    """

    def __init__(
        self,
        object_ids: Iterable[str],
        *,
        daily_dir: str = DEFAULT_DAILY_DIR,
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        self._daily_dir = daily_dir.strip("/") or DEFAULT_DAILY_DIR
        self._ids: dict[str, None] = {}
        self._short: dict[str, list[str]] = defaultdict(list)
        self._slugged: dict[str, str] = {}
        for object_id in object_ids:
            if object_id in self._ids:
                continue
            self._ids[object_id] = None
            self._short[short_name(object_id)].append(object_id)
            self._slugged.setdefault(path_slug(object_id), object_id)

        self._aliases: dict[str, str] = {}
        for alias, target in (aliases or {}).items():
            if not alias:
                continue
            self._aliases[alias] = target
            slugged = component_slug(alias)
            if slugged and slugged != alias:
                self._aliases.setdefault(slugged, target)

    def exists(self, object_id: str) -> bool:
        return object_id in self._ids

    def resolve(self, raw: str) -> str | None:
        """Return the single object id *raw* refers to, or None."""
        return self.resolve_result(raw).target_id

    def resolve_result(self, raw: str) -> ResolveResult:
        ref = raw.strip()
        slugged = component_slug(ref)
        found = _Matches()

        alias_target = self._aliases.get(ref) or self._aliases.get(slugged)
        if alias_target:
            found.add(alias_target, MatchSource.ALIAS)

        if is_date_string(ref):
            date_id = f"{self._daily_dir}/{ref}"
            if not found.ids:
                return ResolveResult(
                    target_id=date_id,
                    matches=[date_id],
                    sources={date_id: MatchSource.DATE},
                )
            found.add(date_id, MatchSource.DATE)

        if _is_path_like(ref):
            self._add_path_matches(found, ref)
        else:
            self._add_short_matches(found, ref, slugged)

        matches = _prefer_files_over_sections(found.ids)
        sources = {m: found.sources[m] for m in matches}
        return ResolveResult(
            target_id=matches[0] if len(matches) == 1 else None,
            matches=matches,
            sources=sources,
        )

    def resolve_all(self, refs: Iterable[str]) -> dict[str, ResolveResult]:
        return {ref: self.resolve_result(ref) for ref in refs}

    def find_collisions(self) -> list[IdCollision]:
        """Short names shared by objects of different files."""
        collisions = [
            IdCollision(short_name=name, object_ids=list(ids))
            for name, ids in self._short.items()
            if len(ids) > 1 and not _file_and_own_sections(ids)
        ]
        return sorted(collisions, key=lambda c: c.short_name)

    # -- matching -----------------------------------------------------------

    def _add_path_matches(self, found: _Matches, ref: str) -> None:
        if ref in self._ids:
            found.add(ref, MatchSource.OBJECT_ID)

        embedded = split_embedded_ref(ref)
        if embedded is not None:
            file_part, fragment = embedded
            full_id = f"{file_part.removesuffix('.md')}#{fragment}"
            if full_id in self._ids:
                found.add(full_id, MatchSource.OBJECT_ID)
        else:
            stripped = ref.removesuffix(".md")
            if stripped in self._ids:
                found.add(stripped, MatchSource.OBJECT_ID)

        slugged_path = path_slug(ref)
        original = self._slugged.get(slugged_path)
        if original is not None:
            found.add(original, MatchSource.OBJECT_ID)

        if not found.ids:
            suffixes = (f"/{ref}", f"/{slugged_path}")
            for object_id in self._ids:
                if object_id.endswith(suffixes):
                    found.add(object_id, MatchSource.SUFFIX)

    def _add_short_matches(self, found: _Matches, ref: str, slugged: str) -> None:
        candidates = self._short.get(ref) or self._short.get(slugged) or []
        if not candidates:
            suffixes = (f"/{ref}", f"/{slugged}")
            candidates = [
                object_id
                for object_id in self._ids
                if short_name(object_id) in (ref, slugged) or object_id.endswith(suffixes)
            ]
        for object_id in candidates:
            found.add(object_id, MatchSource.SHORT_NAME)


def _prefer_files_over_sections(matches: list[str]) -> list[str]:
    if len(matches) < 2:
        return matches
    files = {m for m in matches if "#" not in m}
    if not files:
        return matches
    return [m for m in matches if "#" not in m or m.partition("#")[0] not in files]


def _file_and_own_sections(ids: list[str]) -> bool:
    files = [i for i in ids if "#" not in i]
    if len(files) != 1:
        return False
    return all("#" not in i or i.partition("#")[0] == files[0] for i in ids)
