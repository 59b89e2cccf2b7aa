"""Render pipeline — runs stages in dependency order with mode gating."""

from __future__ import annotations

import logging
import time

from photostage.engine.config import EngineConfig
from photostage.engine.context import RenderContext
from photostage.engine.registry import StageRegistry, get_registry
from photostage.errors import RenderError

logger = logging.getLogger(__name__)


class RenderPipeline:
    """Orchestrates the render stages for one frame."""

    def __init__(
        self,
        registry: StageRegistry | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or EngineConfig()

    def run(self, ctx: RenderContext) -> RenderContext:
        """Run every applicable stage on *ctx*.

        A failing critical stage raises RenderError; a failing non-critical
        stage is recorded in ctx.errors and the render continues.
        """
        start = time.perf_counter()

        skip_ids = self._mode_gate(ctx)
        requested = {s.id for s in self.registry.all()} - skip_ids
        ordered = self.registry.resolve_order(requested)

        logger.debug(
            "Render pipeline (%s): %d stages queued (%d skipped)",
            ctx.request.mode.value,
            len(ordered),
            len(skip_ids),
        )

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                spec.fn(ctx)
            except Exception as e:
                ctx.errors[spec.id] = str(e)
                if spec.critical:
                    logger.error("  %s FAILED, aborting render: %s", spec.id, e)
                    raise RenderError(spec.id, str(e)) from e
                logger.warning("  %s FAILED: %s", spec.id, e)
                continue
            ctx.completed_stages.add(spec.id)
            elapsed = (time.perf_counter() - t0) * 1000
            ctx.timings[spec.id] = elapsed
            logger.debug("  %s completed in %.1fms", spec.id, elapsed)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Render complete (%s %dx%d): %d/%d stages in %.0fms",
            ctx.request.mode.value,
            ctx.output_width,
            ctx.output_height,
            len(ctx.completed_stages),
            len(ordered),
            total,
        )
        return ctx

    def _mode_gate(self, ctx: RenderContext) -> set[str]:
        """Stages that do not apply to this frame.

        - "shadow"-tagged stages are skipped when the theme's shadow is disabled
        - "export"-tagged stages are skipped in preview mode
        - "subject"-tagged stages are skipped when there is no subject
        """
        skip: set[str] = set()
        for spec in self.registry.all():
            if "shadow" in spec.tags and not ctx.theme.shadow.enabled:
                skip.add(spec.id)
            if "export" in spec.tags and not ctx.is_export:
                skip.add(spec.id)
            if "subject" in spec.tags and ctx.request.subject is None:
                skip.add(spec.id)
        return skip
