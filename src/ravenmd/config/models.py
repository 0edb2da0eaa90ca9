"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, raven.toml only contains overrides.
A fresh vault needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ravenmd.domain.ids import DuplicateIdPolicy
from ravenmd.domain.models import DEFAULT_ROOT_TYPE, ParseOptions

# --- raven.toml sections ---


class ParserConfig(BaseModel):
    """[parser] section."""

    model_config = {"frozen": True}

    default_type: str = DEFAULT_ROOT_TYPE
    duplicate_ids: DuplicateIdPolicy = DuplicateIdPolicy.ERROR
    objects_root: str = ""
    pages_root: str = ""

    def to_options(self) -> ParseOptions:
        """Translate this section into the engine's parse options."""
        return ParseOptions(
            default_type=self.default_type,
            duplicate_ids=self.duplicate_ids,
            objects_root=self.objects_root,
            pages_root=self.pages_root,
        )


class VaultConfig(BaseModel):
    """[vault] section."""

    model_config = {"frozen": True}

    extension: str = ".md"
    skip_dirs: list[str] = Field(default_factory=list)
    daily_dir: str = "daily"
    workers: int = Field(default=1, ge=1)

