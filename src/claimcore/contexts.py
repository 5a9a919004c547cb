"""Scoping contexts used as lookup keys into the flag stores.

Provides:
- ``Context`` — immutable ``(key, value)`` tag compared by value.
- ``ContextSet`` — frozen set of contexts (unique, unordered).
- Well-known claim contexts (``claim_default_context`` and friends).
- ``SourceContextRegistry`` — named "source" contexts registered by
  feature modules (e.g. ``"player"`` or ``"minecraft:creeper"``).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

# ── Context keys ────────────────────────────────────────

CLAIM_KEY = "gp_claim"
CLAIM_DEFAULT_KEY = "gp_claim-default"
CLAIM_OVERRIDE_KEY = "gp_claim-override"
WORLD_KEY = "gp_world"
SOURCE_KEY = "gp_source"

# Effective source when the caller does not name one
ANY_SOURCE = "any"


@dataclass(frozen=True, order=True)
class Context:
    """A single ``(key, value)`` scoping tag."""

    key: str
    value: str

    @classmethod
    def parse(cls, text: str) -> "Context | None":
        """Parse ``key=value``; returns None when there is no ``=``."""
        key, sep, value = text.partition("=")
        if not sep or not key.strip() or not value.strip():
            return None
        return cls(key.strip(), value.strip())

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


ContextSet = frozenset  # frozenset[Context]


def context_set(*contexts: Context | None) -> frozenset[Context]:
    """Build a ContextSet, skipping ``None`` entries."""
    return frozenset(c for c in contexts if c is not None)


def claim_context(claim_id: object) -> Context:
    return Context(CLAIM_KEY, str(claim_id))


def claim_default_context(type_name: str) -> Context:
    return Context(CLAIM_DEFAULT_KEY, type_name.lower())


def claim_override_context(type_name: str) -> Context:
    return Context(CLAIM_OVERRIDE_KEY, type_name.lower())


def world_context(world_id: str) -> Context:
    return Context(WORLD_KEY, world_id)


# ── Source contexts ─────────────────────────────────────


class SourceContextRegistry:
    """Named source contexts registered by external feature modules.

    Lookups are case-sensitive. Registration is thread-safe; lookups
    read a dict that is only ever replaced wholesale.
    """

    def __init__(self, contexts: dict[str, Context] | None = None) -> None:
        self._contexts: dict[str, Context] = dict(contexts or {})
        self._lock = threading.Lock()

    def register(self, name: str, context: Context | None = None) -> Context:
        """Register ``name`` (default context ``gp_source=<name>``)."""
        ctx = context or Context(SOURCE_KEY, name)
        with self._lock:
            updated = dict(self._contexts)
            updated[name] = ctx
            self._contexts = updated
        logger.debug("Registered source context %s -> %s", name, ctx)
        return ctx

    def get(self, name: str | None) -> Context | None:
        if name is None:
            return None
        return self._contexts.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._contexts))

    def __contains__(self, name: object) -> bool:
        return name in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)

    @classmethod
    def with_names(cls, names: Iterable[str]) -> "SourceContextRegistry":
        registry = cls()
        for name in names:
            registry.register(name)
        return registry


__all__ = [
    "ANY_SOURCE",
    "CLAIM_DEFAULT_KEY",
    "CLAIM_KEY",
    "CLAIM_OVERRIDE_KEY",
    "SOURCE_KEY",
    "WORLD_KEY",
    "Context",
    "ContextSet",
    "SourceContextRegistry",
    "claim_context",
    "claim_default_context",
    "claim_override_context",
    "context_set",
    "world_context",
]
