"""Configuration models."""

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MARKERS = ["TODO", "FIXME", "HACK", "XXX", "NOTE"]

DEFAULT_IGNORED_DIRS = [
    ".git",
    "node_modules",
    "target",
    "dist",
    "build",
    ".venv",
    "venv",
    "vendor",
    ".next",
    "__pycache__",
    ".pytest_cache",
    "coverage",
]


class ScanConfig(BaseModel):
    """What to look for and where not to look."""

    markers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_MARKERS),
        description="Debt marker tokens to search for",
    )
    ignored_dirs: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_DIRS),
        description="Directory names skipped during traversal (exact match)",
    )
    context_lines: int = Field(2, ge=0, description="Lines of context captured before/after a marker")
    severity: Dict[str, str] = Field(default_factory=dict, description="Optional marker -> severity label")
    include_hidden: bool = Field(False, description="Whether to descend into dot-files and dot-directories")

    model_config = {
        "json_schema_extra": {
            "example": {
                "markers": ["TODO", "FIXME", "HACK"],
                "ignored_dirs": [".git", "node_modules"],
                "context_lines": 2,
                "severity": {"FIXME": "high", "TODO": "low"},
                "include_hidden": False,
            }
        }
    }

    @field_validator("markers")
    @classmethod
    def _distinct_tokens(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one marker is required")
        if any(not token for token in value):
            raise ValueError("marker tokens must be non-empty")
        # Duplicates are aliases; keep first occurrence order
        return list(dict.fromkeys(value))


class FossilSettings(BaseSettings):
    """Runtime settings loaded from environment variables.

    All settings are prefixed with FOSSIL_ (e.g., FOSSIL_MAX_WORKERS).
    """

    model_config = SettingsConfigDict(
        env_prefix="FOSSIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="WARNING", description="Log level when --verbose is not given")
    max_workers: int = Field(default=8, ge=1, description="Worker threads for the tree walk")
    blame_workers: int = Field(default=1, ge=1, description="Worker threads for git blame")
