"""Parse failures raised by the document engine.

INVARIANT: :func:`ravenmd.domain.document.parse_document` raises only
:class:`ParseError`. Malformed traits, wikilinks, tags and values are
never errors; they are simply not recognized.
"""

from __future__ import annotations

from enum import StrEnum


class ParseErrorCode(StrEnum):
    """Categories of hard parse failure."""

    FRONTMATTER = "frontmatter"
    TYPE_DECLARATION = "type_declaration"
    DUPLICATE_ID = "duplicate_id"


class ParseError(Exception):
    """A document could not be parsed.

    Attributes:
        code: Failure category.
        path: Vault-relative path of the offending file (empty when the
            failure is raised below the document level and not yet tagged).
        line: 1-indexed line of the failure, when known.
        reason: Human-readable description without file context.
    """

    def __init__(
        self,
        code: ParseErrorCode,
        reason: str,
        *,
        path: str = "",
        line: int | None = None,
    ) -> None:
        self.code = code
        self.reason = reason
        self.path = path
        self.line = line
        super().__init__(self._render())

    def _render(self) -> str:
        location = self.path or "<document>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.reason}"

    def with_path(self, path: str) -> ParseError:
        """Return a copy of this error tagged with *path*."""
        return ParseError(self.code, self.reason, path=path, line=self.line)
