import pytest
import torch

from simple_splat_field.core.covariance import decode, encode, encode_field


@pytest.mark.parametrize("size", [0.001, 0.01, 0.05, 0.1])
def test_encode_is_isotropic(size):
    part0, part1 = encode(size)
    variance = size * size
    assert part0 == (pytest.approx(variance), 0.0, 0.0)
    assert part1 == (pytest.approx(variance), 0.0, pytest.approx(variance))
    # Off-diagonal terms are exactly zero
    assert part0[1] == 0.0 and part0[2] == 0.0 and part1[1] == 0.0


def test_encode_field_repeats_encoding():
    cov0, cov1 = encode_field(0.01, 5)
    assert cov0.shape == (5, 3) and cov1.shape == (5, 3)
    assert cov0.dtype == torch.float32
    assert torch.allclose(cov0, torch.tensor([1e-4, 0.0, 0.0]).expand(5, 3))
    assert torch.allclose(cov1, torch.tensor([1e-4, 0.0, 1e-4]).expand(5, 3))


def test_encode_field_empty():
    cov0, cov1 = encode_field(0.01, 0)
    assert cov0.shape == (0, 3) and cov1.shape == (0, 3)


def test_decode_rebuilds_symmetric_matrix():
    cov0 = torch.tensor([[1.0, 2.0, 3.0]])
    cov1 = torch.tensor([[4.0, 5.0, 6.0]])
    matrix = decode(cov0, cov1)
    expected = torch.tensor([[[1.0, 2.0, 3.0], [2.0, 4.0, 5.0], [3.0, 5.0, 6.0]]])
    assert torch.equal(matrix, expected)


def test_decode_isotropic_field_is_scaled_identity():
    cov0, cov1 = encode_field(0.1, 3)
    matrix = decode(cov0, cov1)
    assert torch.allclose(matrix, 0.01 * torch.eye(3).expand(3, 3, 3))
