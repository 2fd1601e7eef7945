import random

import pytest
import torch

from simple_splat_field.config import SplatFieldConfig
from simple_splat_field.core.component import SplatFieldComponent
from simple_splat_field.core.publisher import PublisherState
from simple_splat_field.errors import BufferAllocationError, PublisherStateError
from simple_splat_field.fields import GoldenSpiralSampler, UniformSphereSampler

from .conftest import BufferTracker


def bound_arrays(recorder):
    position, color, cov0, cov1, _ = recorder.binds[-1]
    return [buffer.data.clone() for buffer in (position, color, cov0, cov1)]


@pytest.fixture
def make_component(recorder, tracker):
    def factory(config, **kwargs):
        kwargs.setdefault("buffer_factory", tracker)
        return SplatFieldComponent(config, recorder, **kwargs)

    return factory


def test_default_strategies_follow_config(make_component):
    static = make_component(SplatFieldConfig.static())
    animated = make_component(SplatFieldConfig.animated())
    assert isinstance(static.sampler, UniformSphereSampler)
    assert static.animation.name == "static"
    assert isinstance(animated.sampler, GoldenSpiralSampler)
    assert animated.animation.name == "orbit"


def test_end_to_end_scenario(make_component, recorder, tracker):
    config = SplatFieldConfig.static(splat_count=4, cloud_radius=2.0, splat_size=0.01, speed=1.0, seed=0)
    component = make_component(config)

    component.activate()
    component.tick(0.0)

    base = component.base_positions
    assert base.shape == (4, 3)
    assert (torch.linalg.vector_norm(base, dim=-1) <= 2.0).all()

    assert len(recorder.binds) == 1
    assert recorder.binds[0][4] == 4

    position, color, cov0, cov1 = bound_arrays(recorder)
    assert torch.equal(position, base)
    assert torch.allclose(color[:, :3], base / 2.0 * 0.5 + 0.5)
    assert torch.allclose(cov0, torch.tensor([0.0001, 0.0, 0.0]).expand(4, 3))
    assert torch.allclose(cov1, torch.tensor([0.0001, 0.0, 0.0001]).expand(4, 3))
    assert torch.all(cov0[:, 1:] == 0) and torch.all(cov1[:, 1] == 0)

    component.deactivate()
    assert tracker.live == 0


def test_animated_at_time_zero(make_component, recorder):
    config = SplatFieldConfig.animated(splat_count=4, cloud_radius=2.0, splat_size=0.01, speed=1.0, seed=0)
    component = make_component(config)
    component.activate()
    component.tick(0.0)

    base = component.base_positions
    position = bound_arrays(recorder)[0]
    assert torch.equal(position[:, [0, 2]], base[:, [0, 2]])
    dist = torch.linalg.vector_norm(base, dim=-1)
    assert torch.allclose(position[:, 1], base[:, 1] + torch.sin(dist * 3.0) * 0.2)


@pytest.mark.parametrize("config", [SplatFieldConfig.static(seed=3), SplatFieldConfig.animated(seed=3)])
def test_tick_is_idempotent(make_component, recorder, config):
    component = make_component(config)
    component.activate()

    component.tick(1.25)
    first = bound_arrays(recorder)
    component.tick(1.25)
    second = bound_arrays(recorder)

    for a, b in zip(first, second):
        assert torch.equal(a, b)


def test_base_positions_are_stable_across_ticks(make_component):
    component = make_component(SplatFieldConfig.animated(seed=5))
    component.activate()
    base = component.base_positions.clone()
    for t in (0.1, 0.2, 5.0):
        component.tick(t)
    assert torch.equal(component.base_positions, base)


def test_seed_reproduces_field(make_component):
    a = make_component(SplatFieldConfig.animated(seed=11))
    b = make_component(SplatFieldConfig.animated(seed=11))
    a.activate()
    b.activate()
    assert torch.equal(a.base_positions, b.base_positions)


def test_injected_generator(make_component):
    a = make_component(SplatFieldConfig.static(), generator=torch.Generator().manual_seed(99))
    b = make_component(SplatFieldConfig.static(), generator=torch.Generator().manual_seed(99))
    a.activate()
    b.activate()
    assert torch.equal(a.base_positions, b.base_positions)


def test_ticks_do_not_rebind_or_reallocate(make_component, recorder, tracker):
    component = make_component(SplatFieldConfig.animated(splat_count=50, seed=1))
    component.activate()
    for frame in range(10):
        component.tick(frame / 60.0)
    assert len(recorder.binds) == 1
    assert len(tracker.buffers) == 4


def test_recreation_on_count_change(make_component, recorder, events):
    component = make_component(SplatFieldConfig.animated(splat_count=1000, seed=2))
    component.activate()
    component.tick(0.1)
    del events[:]

    component.config.splat_count = 500
    component.tick(0.2)

    kinds = [event[0] for event in events]
    assert kinds == ["dispose"] * 4 + ["allocate"] * 4 + ["bind"]
    assert all(event[1] == 1000 for event in events[:4])
    assert all(event[1] == 500 for event in events[4:8])
    assert events[-1] == ("bind", 500)
    assert component.count == 500
    assert recorder.binds[-1][4] == 500


def test_other_config_changes_do_not_recreate(make_component, recorder):
    component = make_component(SplatFieldConfig.static(splat_count=20, seed=2))
    component.activate()
    component.config.splat_size = 0.05
    component.config.cloud_radius = 4.0
    component.tick(0.5)

    assert len(recorder.binds) == 1
    cov0 = bound_arrays(recorder)[2]
    assert torch.allclose(cov0[:, 0], torch.full((20,), 0.0025))


def test_non_positive_count_is_empty_field(make_component, recorder, tracker):
    component = make_component(SplatFieldConfig.static(splat_count=0))
    component.activate()
    component.tick(1.0)

    assert component.count == 0
    assert tracker.live == 0
    assert recorder.binds == [(None, None, None, None, 0)]

    component.config.splat_count = 3
    component.tick(2.0)
    assert tracker.live == 4
    assert recorder.binds[-1][4] == 3


def test_tick_before_activate(make_component):
    component = make_component(SplatFieldConfig.static())
    with pytest.raises(PublisherStateError):
        component.tick(0.0)


def test_activate_twice(make_component):
    component = make_component(SplatFieldConfig.static(splat_count=4))
    component.activate()
    with pytest.raises(PublisherStateError):
        component.activate()


def test_deactivate_is_idempotent_and_allows_reactivation(make_component, tracker):
    component = make_component(SplatFieldConfig.static(splat_count=4))
    component.deactivate()
    component.activate()
    component.deactivate()
    component.deactivate()
    assert tracker.live == 0
    assert not component.is_active

    component.activate()
    assert tracker.live == 4
    assert component.publisher.state is PublisherState.BOUND


def test_allocation_failure_on_activate(recorder):
    tracker = BufferTracker(fail_on=3)
    component = SplatFieldComponent(SplatFieldConfig.static(splat_count=8), recorder, buffer_factory=tracker)

    with pytest.raises(BufferAllocationError):
        component.activate()

    assert tracker.live == 0
    assert not component.is_active
    assert recorder.binds == []


def test_allocation_failure_on_recount_unbinds_renderer(recorder):
    tracker = BufferTracker(fail_on=6)
    component = SplatFieldComponent(SplatFieldConfig.static(splat_count=8, seed=1), recorder, buffer_factory=tracker)
    component.activate()

    component.config.splat_count = 4
    with pytest.raises(BufferAllocationError):
        component.tick(0.1)

    assert tracker.live == 0
    assert component.count == 0
    assert component.publisher.state is PublisherState.UNBOUND
    assert recorder.binds[-1] == (None, None, None, None, 0)

    # The next tick re-creates the field once allocation succeeds again
    tracker.fail_on = None
    component.tick(0.2)

    assert tracker.live == 4
    assert component.count == 4
    assert component.publisher.state is PublisherState.BOUND
    position, color, cov0, cov1, count = recorder.binds[-1]
    assert count == 4
    assert all(buffer.is_valid for buffer in (position, color, cov0, cov1))


def test_compute_frame_requires_active_field(make_component):
    component = make_component(SplatFieldConfig.static(splat_count=4))
    with pytest.raises(PublisherStateError):
        component.compute_frame(0.0)

    component.activate()
    assert component.compute_frame(0.0).count == 4

    component.deactivate()
    with pytest.raises(PublisherStateError):
        component.compute_frame(0.0)


def test_live_buffers_are_zero_or_four(recorder):
    tracker = BufferTracker()
    component = SplatFieldComponent(SplatFieldConfig.animated(splat_count=16, seed=4), recorder, buffer_factory=tracker)
    rng = random.Random(0)

    for step in range(200):
        action = rng.choice(["activate", "deactivate", "tick", "recount"])
        if action == "activate" and not component.is_active:
            component.activate()
        elif action == "deactivate":
            component.deactivate()
        elif action == "tick" and component.is_active:
            component.tick(step / 30.0)
        elif action == "recount":
            component.config.splat_count = rng.choice([0, 1, 16, 33])
            if component.is_active:
                component.tick(step / 30.0)
        assert tracker.live in (0, 4)

    component.deactivate()
    assert tracker.live == 0
