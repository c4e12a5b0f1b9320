from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SideEffectOutcome:
    name: str
    ok: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "ok": self.ok, "error": self.error}


@dataclass
class Outcome(Generic[T]):
    """Result of a primary operation plus what happened to its best-effort side effects."""

    primary: T
    side_effects: List[SideEffectOutcome] = field(default_factory=list)

    @property
    def side_effects_ok(self) -> bool:
        return all(s.ok for s in self.side_effects)


def run_side_effect(name: str, fn: Callable[[], object]) -> SideEffectOutcome:
    """Run fn, logging instead of raising. A falsy return value counts as a failure."""
    try:
        result = fn()
    except Exception as e:
        logger.exception("Side effect %r failed", name)
        return SideEffectOutcome(name=name, ok=False, error=str(e))
    if result is False:
        logger.warning("Side effect %r reported failure", name)
        return SideEffectOutcome(name=name, ok=False, error="reported failure")
    return SideEffectOutcome(name=name, ok=True)
