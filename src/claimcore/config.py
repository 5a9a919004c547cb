"""Configuration for the claim engine.

This module provides Pydantic-validated configuration models for the
claim flag service (log level, flag namespace, wilderness bounds,
deletion policy).

All settings come through ``ClaimCoreConfig``. Direct os.environ/os.getenv
usage is confined to :func:`load_config_from_env`.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

_NAMESPACE_RE = re.compile(r"^[a-z0-9_-]+(\.[a-z0-9_-]+)*$")
_TRUTHY = ("true", "1", "yes", "on")


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DeletionPolicy(str, Enum):
    """What happens to the children of a deleted claim.

    - CASCADE: the whole subtree is deleted
    - REPARENT: direct children move to the grandparent
    """

    CASCADE = "cascade"
    REPARENT = "reparent"


class WildernessBounds(BaseModel):
    """Extent of the synthetic wilderness claim of every world."""

    model_config = {"extra": "forbid"}

    min_y: int = Field(default=0, description="Lowest block height")
    max_y: int = Field(default=255, description="Highest block height")
    radius: int = Field(
        default=30_000_000,
        gt=0,
        description="Half-width of the world border in blocks",
    )

    @model_validator(mode="after")
    def validate_heights(self) -> "WildernessBounds":
        if self.min_y > self.max_y:
            raise ValueError("min_y must not exceed max_y")
        return self


class ClaimCoreConfig(BaseModel):
    """Configuration contract for the claim flag service."""

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the service",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Flags
    flag_namespace: str = Field(
        default="griefprevention.flag",
        description="Prefix of every flag permission key",
    )
    seed_default_flags: bool = Field(
        default=True,
        description="Populate the transient DEFAULT layer from the flag catalog at start",
    )

    # Claims
    deletion_policy: DeletionPolicy = Field(
        default=DeletionPolicy.CASCADE,
        description="Handling of children when a claim is deleted",
    )
    wilderness: WildernessBounds = Field(
        default_factory=WildernessBounds,
        description="Wilderness claim extent",
    )

    @field_validator("flag_namespace")
    @classmethod
    def validate_flag_namespace(cls, v: str) -> str:
        """Dotted lowercase identifier without a trailing dot."""
        if not _NAMESPACE_RE.match(v):
            raise ValueError(f"Invalid flag namespace: {v!r}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @field_validator("deletion_policy", mode="before")
    @classmethod
    def validate_deletion_policy(cls, v: str | DeletionPolicy) -> DeletionPolicy:
        if isinstance(v, str):
            return DeletionPolicy(v.lower())
        return v

    model_config = {
        "extra": "forbid",  # Prevent accidental extra fields
    }


def load_config_from_env() -> ClaimCoreConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - CLAIM_FLAG_NAMESPACE: Flag permission prefix
    - CLAIM_SEED_DEFAULT_FLAGS: Seed catalog defaults (default: true)
    - CLAIM_DELETION_POLICY: cascade | reparent
    - WILDERNESS_MIN_Y / WILDERNESS_MAX_Y / WILDERNESS_RADIUS: wilderness extent

    Returns:
        ClaimCoreConfig instance with values from environment or defaults.
    """
    import os

    wilderness = WildernessBounds(
        min_y=int(os.getenv("WILDERNESS_MIN_Y", "0")),
        max_y=int(os.getenv("WILDERNESS_MAX_Y", "255")),
        radius=int(os.getenv("WILDERNESS_RADIUS", "30000000")),
    )

    return ClaimCoreConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
        flag_namespace=os.getenv("CLAIM_FLAG_NAMESPACE", "griefprevention.flag"),
        seed_default_flags=os.getenv("CLAIM_SEED_DEFAULT_FLAGS", "true").lower() in _TRUTHY,
        deletion_policy=os.getenv("CLAIM_DELETION_POLICY", "cascade"),
        wilderness=wilderness,
    )


__all__ = [
    "ClaimCoreConfig",
    "DeletionPolicy",
    "LogLevel",
    "WildernessBounds",
    "load_config_from_env",
]
