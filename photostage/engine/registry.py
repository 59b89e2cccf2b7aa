"""Render stage registry — every compositing step is a standalone function registered via decorator.

Usage:
    @render_stage(id="S3", phase=RenderPhase.SUBJECT, dependencies=["S2"], critical=True)
    def draw_shadow(ctx: RenderContext) -> None:
        ctx.canvas.alpha_composite(...)

Adding a new stage = creating one file under engine/stages with the decorator.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from photostage.engine.context import RenderContext

logger = logging.getLogger(__name__)


class RenderPhase(enum.IntEnum):
    BACKGROUND = 0
    SUBJECT = 1
    FOREGROUND = 2
    OVERLAY = 3
    OUTPUT = 4


@dataclass
class StageSpec:
    id: str
    phase: RenderPhase
    fn: Callable[["RenderContext"], None]
    dependencies: list[str] = field(default_factory=list)
    tags: set[str] = field(default_factory=set)
    # A failing critical stage aborts the render; others are recorded and skipped.
    critical: bool = True
    description: str = ""


class StageRegistry:
    """Registry of render stages."""

    def __init__(self) -> None:
        self._stages: dict[str, StageSpec] = {}

    def register(self, spec: StageSpec) -> None:
        if spec.id in self._stages:
            raise ValueError(f"Duplicate stage ID: {spec.id}")
        self._stages[spec.id] = spec
        logger.debug("Registered stage %s (%s)", spec.id, spec.phase.name)

    def get(self, stage_id: str) -> StageSpec:
        return self._stages[stage_id]

    def get_phase(self, phase: RenderPhase) -> list[StageSpec]:
        specs = [s for s in self._stages.values() if s.phase == phase]
        return sorted(specs, key=lambda s: s.id)

    def all(self) -> list[StageSpec]:
        return sorted(self._stages.values(), key=lambda s: (s.phase, s.id))

    def resolve_order(self, requested_ids: set[str] | None = None) -> list[StageSpec]:
        """Topological sort respecting dependencies. If requested_ids is None, run all.

        Dependencies outside the requested set are treated as satisfied, so a
        gated-off stage never pulls itself back in through a dependent.
        """
        pool = self._stages
        if requested_ids is not None:
            unknown = requested_ids - pool.keys()
            if unknown:
                raise KeyError(f"Unknown stage IDs: {sorted(unknown)}")
            pool = {k: v for k, v in pool.items() if k in requested_ids}

        # Kahn's algorithm
        in_degree: dict[str, int] = {sid: 0 for sid in pool}
        for sid, spec in pool.items():
            for dep in spec.dependencies:
                if dep in pool:
                    in_degree[sid] += 1

        queue = sorted([sid for sid, d in in_degree.items() if d == 0])
        ordered: list[StageSpec] = []

        while queue:
            sid = queue.pop(0)
            ordered.append(pool[sid])
            for other_id, other_spec in pool.items():
                if sid in other_spec.dependencies:
                    in_degree[other_id] -= 1
                    if in_degree[other_id] == 0:
                        queue.append(other_id)
                        queue.sort()

        if len(ordered) != len(pool):
            missing = set(pool.keys()) - {s.id for s in ordered}
            raise ValueError(f"Circular dependency detected among: {missing}")

        return ordered

    @property
    def count(self) -> int:
        return len(self._stages)


# Module-level singleton
_registry = StageRegistry()


def get_registry() -> StageRegistry:
    return _registry


def render_stage(
    *,
    id: str,
    phase: RenderPhase,
    dependencies: list[str] | None = None,
    tags: set[str] | None = None,
    critical: bool = True,
    description: str = "",
    registry: StageRegistry | None = None,
):
    """Decorator to register a render stage function."""

    def decorator(fn: Callable[["RenderContext"], None]):
        spec = StageSpec(
            id=id,
            phase=phase,
            fn=fn,
            dependencies=dependencies or [],
            tags=tags or set(),
            critical=critical,
            description=description,
        )
        (registry or _registry).register(spec)
        return fn

    return decorator
