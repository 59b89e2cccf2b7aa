"""Tests for the render stage registry."""

import pytest

from photostage.engine.context import RenderContext
from photostage.engine.registry import (
    RenderPhase,
    StageRegistry,
    StageSpec,
    render_stage,
)


def _noop(ctx: RenderContext) -> None:
    pass


def test_register_and_get():
    reg = StageRegistry()
    spec = StageSpec(id="S1", phase=RenderPhase.BACKGROUND, fn=_noop)
    reg.register(spec)
    assert reg.get("S1") is spec
    assert reg.count == 1


def test_duplicate_id_rejected():
    reg = StageRegistry()
    reg.register(StageSpec(id="S1", phase=RenderPhase.BACKGROUND, fn=_noop))
    with pytest.raises(ValueError):
        reg.register(StageSpec(id="S1", phase=RenderPhase.OUTPUT, fn=_noop))


def test_get_phase():
    reg = StageRegistry()
    reg.register(StageSpec(id="S1", phase=RenderPhase.BACKGROUND, fn=_noop))
    reg.register(StageSpec(id="S4", phase=RenderPhase.SUBJECT, fn=_noop))
    subject = reg.get_phase(RenderPhase.SUBJECT)
    assert [s.id for s in subject] == ["S4"]


def test_resolve_order_with_deps():
    reg = StageRegistry()
    reg.register(StageSpec(id="S9", phase=RenderPhase.OUTPUT, fn=_noop, dependencies=["S2"]))
    reg.register(StageSpec(id="S2", phase=RenderPhase.SUBJECT, fn=_noop))
    ids = [s.id for s in reg.resolve_order(None)]
    assert ids.index("S2") < ids.index("S9")


def test_resolve_order_does_not_pull_in_gated_dependencies():
    reg = StageRegistry()
    reg.register(StageSpec(id="S3", phase=RenderPhase.SUBJECT, fn=_noop))
    reg.register(StageSpec(id="S4", phase=RenderPhase.SUBJECT, fn=_noop, dependencies=["S3"]))
    ids = [s.id for s in reg.resolve_order({"S4"})]
    assert ids == ["S4"]


def test_resolve_order_unknown_id():
    reg = StageRegistry()
    with pytest.raises(KeyError):
        reg.resolve_order({"S42"})


def test_resolve_order_detects_cycle():
    reg = StageRegistry()
    reg.register(StageSpec(id="A", phase=RenderPhase.SUBJECT, fn=_noop, dependencies=["B"]))
    reg.register(StageSpec(id="B", phase=RenderPhase.SUBJECT, fn=_noop, dependencies=["A"]))
    with pytest.raises(ValueError):
        reg.resolve_order(None)


def test_decorator_registers_into_given_registry():
    reg = StageRegistry()

    @render_stage(id="X1", phase=RenderPhase.OVERLAY, tags={"export"}, registry=reg)
    def stamp(ctx: RenderContext) -> None:
        pass

    spec = reg.get("X1")
    assert spec.fn is stamp
    assert spec.tags == {"export"}
    assert spec.critical


def test_builtin_stages_draw_in_order():
    from photostage.engine.compositor import _ensure_stages
    from photostage.engine.registry import get_registry

    _ensure_stages()
    ids = [s.id for s in get_registry().resolve_order(None)]
    assert ids == ["S1", "S2", "S3", "S4", "S5", "S6", "S7"]
