import pytest
import torch

from simple_splat_field.core.buffers import StructuredBuffer


class TrackedBuffer(StructuredBuffer):
    """StructuredBuffer that reports allocation and disposal to a tracker."""

    def __init__(self, tracker, count, stride, device):
        super().__init__(count, stride, device)
        self.tracker = tracker
        tracker.buffers.append(self)
        tracker.events.append(("allocate", count, stride))

    def dispose(self):
        if self.is_valid:
            self.tracker.events.append(("dispose", self.count, self.stride))
        super().dispose()


class BufferTracker:
    """Buffer factory recording every allocation and disposal in order."""

    def __init__(self, events=None, fail_on=None):
        self.events = events if events is not None else []
        self.buffers = []
        self.fail_on = fail_on
        self.calls = 0

    def __call__(self, count, stride, device):
        self.calls += 1
        if self.fail_on is not None and self.calls == self.fail_on:
            raise RuntimeError("out of device memory")
        return TrackedBuffer(self, count, stride, device)

    @property
    def live(self):
        return sum(buffer.is_valid for buffer in self.buffers)


class RecordingRenderer:
    """Renderer recording bind calls into a shared event log."""

    def __init__(self, events=None):
        self.events = events if events is not None else []
        self.binds = []

    def set_external_buffers(self, position, color, cov0, cov1, count):
        self.binds.append((position, color, cov0, cov1, count))
        self.events.append(("bind", count))


@pytest.fixture
def events():
    return []


@pytest.fixture
def tracker(events):
    return BufferTracker(events)


@pytest.fixture
def recorder(events):
    return RecordingRenderer(events)


@pytest.fixture
def generator():
    return torch.Generator().manual_seed(1234)
