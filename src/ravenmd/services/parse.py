"""ParseService: parse documents, validate references, find backlinks.

The multi-file driver catches failures per file and keeps going: a bad
document becomes a warning and a ``failures`` entry, never an aborted
batch. Documents are independent, so a vault can be parsed on several
worker threads (``[vault] workers``).
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from ravenmd.domain.document import parse_document
from ravenmd.domain.errors import ParseError
from ravenmd.domain.models import ParsedDocument
from ravenmd.domain.resolver import MatchSource, Resolver
from ravenmd.domain.values import StringValue
from ravenmd.services.base import BaseService
from ravenmd.services.result import (
    NO_VAULT,
    NOT_FOUND,
    PARSE_FAILED,
    READ_FAILED,
    ServiceResult,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Issue severity and category constants
# ---------------------------------------------------------------------------

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

CAT_PARSE = "parse_error"
CAT_MISSING_REF = "missing_reference"
CAT_AMBIGUOUS_REF = "ambiguous_reference"
CAT_COLLISION = "short_name_collision"

ALIAS_FIELD = "alias"


@dataclass(frozen=True)
class FileFailure:
    """A document that could not be read or parsed."""

    path: str
    code: str
    message: str
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class VaultParse:
    """Every document of a vault run, plus the ones that failed."""

    documents: list[ParsedDocument] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def object_count(self) -> int:
        return sum(len(doc.objects) for doc in self.documents)

    @property
    def trait_count(self) -> int:
        return sum(len(doc.traits) for doc in self.documents)

    @property
    def ref_count(self) -> int:
        return sum(len(doc.refs) for doc in self.documents)


class ParseService(BaseService):
    """Parsing and reference-level operations over a vault."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse_file(self, path: str | Path) -> ServiceResult:
        """Parse a single document."""
        op = "parse"
        file_path = self._vault.resolve_path(path)
        if not file_path.is_file():
            return ServiceResult.failure(op, NOT_FOUND, f"No such file: {path}", path=str(path))

        outcome = self._load(file_path)
        if isinstance(outcome, FileFailure):
            return ServiceResult.failure(
                op, outcome.code, outcome.message, path=outcome.path, line=outcome.line
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={"document": outcome.model_dump(mode="json")},
            meta=_counts([outcome]),
        )

    def parse_vault(self) -> ServiceResult:
        """Parse every document in the vault."""
        op = "parse_vault"
        if not self._vault.exists():
            return _no_vault(op, self._vault.root)

        run = self.parse_all()
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "documents": [doc.model_dump(mode="json") for doc in run.documents],
                "failures": [failure.to_dict() for failure in run.failures],
            },
            warnings=[_failure_warning(f) for f in run.failures],
            meta={
                "files": len(run.documents) + len(run.failures),
                "failed": len(run.failures),
                "objects": run.object_count,
                "traits": run.trait_count,
                "refs": run.ref_count,
            },
        )

    def check(self, *, min_severity: str = SEVERITY_WARNING) -> ServiceResult:
        """Report parse failures and references that do not resolve.

        With *min_severity* ``"error"`` warnings are dropped.
        """
        op = "check"
        if not self._vault.exists():
            return _no_vault(op, self._vault.root)

        run = self.parse_all()
        resolver = self.build_resolver(run.documents)

        issues: list[dict[str, Any]] = [
            {
                "severity": SEVERITY_ERROR,
                "category": CAT_PARSE,
                "path": failure.path,
                "line": failure.line,
                "message": failure.message,
            }
            for failure in run.failures
        ]
        issues.extend(_reference_issues(run.documents, resolver))
        issues.extend(
            {
                "severity": SEVERITY_WARNING,
                "category": CAT_COLLISION,
                "path": None,
                "line": None,
                "message": (
                    f"Short name {collision.short_name!r} is shared by "
                    + ", ".join(collision.object_ids)
                ),
            }
            for collision in resolver.find_collisions()
        )
        if min_severity == SEVERITY_ERROR:
            issues = [issue for issue in issues if issue["severity"] == SEVERITY_ERROR]

        errors = sum(1 for issue in issues if issue["severity"] == SEVERITY_ERROR)
        return ServiceResult(
            ok=True,
            op=op,
            data={"issues": issues, "count": len(issues), "errors": errors},
            meta={"files": len(run.documents) + len(run.failures)},
        )

    def backlinks(self, target: str) -> ServiceResult:
        """List references, vault-wide, that resolve to *target*."""
        op = "backlinks"
        if not self._vault.exists():
            return _no_vault(op, self._vault.root)

        run = self.parse_all()
        resolver = self.build_resolver(run.documents)
        resolved = resolver.resolve_result(target)
        if resolved.target_id is None:
            if resolved.ambiguous:
                msg = f"Ambiguous target {target!r}: {', '.join(resolved.matches)}"
            else:
                msg = f"No object matches {target!r}"
            return ServiceResult.failure(op, NOT_FOUND, msg, target=target, matches=resolved.matches)

        target_id = resolved.target_id
        cache: dict[str, str | None] = {}
        backlinks: list[dict[str, Any]] = []
        for doc in run.documents:
            for ref in doc.refs:
                if ref.target_raw not in cache:
                    cache[ref.target_raw] = resolver.resolve(ref.target_raw)
                if cache[ref.target_raw] == target_id:
                    backlinks.append({"file_path": doc.file_path, **ref.model_dump(mode="json")})

        return ServiceResult(
            ok=True,
            op=op,
            data={"target": target_id, "backlinks": backlinks, "count": len(backlinks)},
            warnings=[_failure_warning(f) for f in run.failures],
        )

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def parse_all(self) -> VaultParse:
        """Parse every vault document, collecting failures per file."""
        paths = self._vault.document_paths()
        workers = self._vault.settings.vault.workers

        if workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(self._load, paths))
        else:
            outcomes = [self._load(path) for path in paths]

        run = VaultParse()
        for outcome in outcomes:
            if isinstance(outcome, FileFailure):
                run.failures.append(outcome)
            else:
                run.documents.append(outcome)

        logger.debug(
            "Parsed %d documents (%d failed, %d objects, %d refs)",
            len(run.documents),
            len(run.failures),
            run.object_count,
            run.ref_count,
        )
        return run

    def build_resolver(self, documents: list[ParsedDocument]) -> Resolver:
        """Build a resolver over every object id, with ``alias`` fields."""
        object_ids: list[str] = []
        aliases: dict[str, str] = {}
        for doc in documents:
            for obj in doc.objects:
                object_ids.append(obj.id)
                alias = obj.fields.get(ALIAS_FIELD)
                if isinstance(alias, StringValue) and alias.value:
                    aliases.setdefault(alias.value, obj.id)
        return Resolver(
            object_ids,
            daily_dir=self._vault.settings.vault.daily_dir,
            aliases=aliases,
        )

    def _load(self, path: Path) -> ParsedDocument | FileFailure:
        try:
            relative = self._vault.relative_path(path)
        except ValueError:
            relative = path.as_posix()

        try:
            text = self._vault.read(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Cannot read %s: %s", relative, exc)
            return FileFailure(path=relative, code=READ_FAILED, message=f"Cannot read {relative}: {exc}")

        try:
            return parse_document(text, relative, options=self._options)
        except ParseError as exc:
            logger.debug("Cannot parse %s: %s", relative, exc)
            return FileFailure(path=relative, code=PARSE_FAILED, message=str(exc), line=exc.line)


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def _reference_issues(documents: list[ParsedDocument], resolver: Resolver) -> list[dict[str, Any]]:
    issues: list[dict[str, Any]] = []
    for doc in documents:
        for ref in doc.refs:
            result = resolver.resolve_result(ref.target_raw)
            if result.ambiguous:
                issues.append(
                    {
                        "severity": SEVERITY_WARNING,
                        "category": CAT_AMBIGUOUS_REF,
                        "path": doc.file_path,
                        "line": ref.line,
                        "message": (
                            f"[[{ref.target_raw}]] matches {', '.join(result.matches)}"
                        ),
                    }
                )
                continue
            missing = result.target_id is None or (
                result.sources.get(result.target_id) is MatchSource.DATE
                and not resolver.exists(result.target_id)
            )
            if missing:
                issues.append(
                    {
                        "severity": SEVERITY_ERROR,
                        "category": CAT_MISSING_REF,
                        "path": doc.file_path,
                        "line": ref.line,
                        "message": f"[[{ref.target_raw}]] does not resolve to any object",
                    }
                )
    return issues


def _counts(documents: list[ParsedDocument]) -> dict[str, int]:
    return {
        "objects": sum(len(doc.objects) for doc in documents),
        "traits": sum(len(doc.traits) for doc in documents),
        "refs": sum(len(doc.refs) for doc in documents),
    }


def _failure_warning(failure: FileFailure) -> str:
    return f"Skipped {failure.path}: {failure.message}"


def _no_vault(op: str, root: Path) -> ServiceResult:
    return ServiceResult.failure(op, NO_VAULT, f"Vault directory not found: {root}", path=str(root))
