import pytest
import torch

from simple_splat_field.core.buffers import BufferQuartet, SplatFrame, StructuredBuffer
from simple_splat_field.errors import BufferAllocationError, BufferConsistencyError

from .conftest import BufferTracker


def make_frame(count, fill=1.0):
    return SplatFrame(
        positions=torch.full((count, 3), fill),
        colors=torch.full((count, 4), fill),
        cov0=torch.full((count, 3), fill),
        cov1=torch.full((count, 3), fill),
    )


def test_structured_buffer_layout():
    buffer = StructuredBuffer(10, 16)
    assert buffer.width == 4
    assert buffer.data.shape == (10, 4)
    assert buffer.data.dtype == torch.float32
    assert buffer.data.element_size() * buffer.width == 16


@pytest.mark.parametrize("count,stride", [(0, 12), (-3, 12), (4, 0), (4, 10)])
def test_structured_buffer_rejects_invalid_layout(count, stride):
    with pytest.raises(ValueError):
        StructuredBuffer(count, stride)


def test_set_data_copies_in_place():
    buffer = StructuredBuffer(3, 12)
    storage = buffer.data
    values = torch.arange(9, dtype=torch.float32).reshape(3, 3)
    buffer.set_data(values)
    assert buffer.data is storage
    assert torch.equal(buffer.data, values)
    values += 1
    assert not torch.equal(buffer.data, values)


def test_set_data_rejects_mismatched_shape():
    buffer = StructuredBuffer(3, 12)
    with pytest.raises(BufferConsistencyError):
        buffer.set_data(torch.zeros(4, 3))
    with pytest.raises(BufferConsistencyError):
        buffer.set_data(torch.zeros(3, 4))


def test_disposed_buffer():
    buffer = StructuredBuffer(3, 12)
    buffer.dispose()
    buffer.dispose()
    assert not buffer.is_valid
    with pytest.raises(BufferConsistencyError):
        _ = buffer.data
    with pytest.raises(BufferConsistencyError):
        buffer.set_data(torch.zeros(3, 3))


def test_frame_rejects_misaligned_arrays():
    with pytest.raises(BufferConsistencyError, match="colors"):
        SplatFrame(
            positions=torch.zeros(4, 3),
            colors=torch.zeros(5, 4),
            cov0=torch.zeros(4, 3),
            cov1=torch.zeros(4, 3),
        )
    with pytest.raises(BufferConsistencyError, match="cov1"):
        SplatFrame(
            positions=torch.zeros(4, 3),
            colors=torch.zeros(4, 4),
            cov0=torch.zeros(4, 3),
            cov1=torch.zeros(4, 4),
        )


def test_quartet_allocates_four_buffers_with_fixed_strides(tracker):
    quartet = BufferQuartet.allocate(8, factory=tracker)
    assert [buffer.stride for buffer in quartet] == [12, 16, 12, 12]
    assert all(buffer.count == 8 for buffer in quartet)
    assert tracker.live == 4

    quartet.release()
    assert tracker.live == 0
    assert not quartet.is_valid


@pytest.mark.parametrize("fail_on", [1, 2, 3, 4])
def test_quartet_allocation_is_all_or_nothing(fail_on):
    tracker = BufferTracker(fail_on=fail_on)
    with pytest.raises(BufferAllocationError, match="out of device memory"):
        BufferQuartet.allocate(8, factory=tracker)
    assert tracker.live == 0


def test_quartet_rejects_invalid_count():
    with pytest.raises(BufferAllocationError):
        BufferQuartet.allocate(0)


def test_quartet_upload():
    quartet = BufferQuartet.allocate(5)
    quartet.upload(make_frame(5, 2.0))
    for buffer in quartet:
        assert torch.all(buffer.data == 2.0)

    with pytest.raises(BufferConsistencyError):
        quartet.upload(make_frame(6))


def test_quartet_context_manager_releases(tracker):
    with BufferQuartet.allocate(5, factory=tracker) as quartet:
        assert quartet.is_valid
        assert tracker.live == 4
    assert tracker.live == 0
