# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-22
# Description: test_vector_normalizer.py
# -----------------------------------------------------------------------------
import math

import pytest

from errors.Faults import ValidationFault
from normalizer.VectorNormalizer import VectorNormalizer


@pytest.fixture
def normalizer() -> VectorNormalizer:
    return VectorNormalizer()


def test_truncates_to_top_weights(normalizer):
    assert normalizer.normalize({"a": 0.1, "b": 0.9, "c": 0.5}, 2) == [0.9, 0.5]


def test_pads_with_zeros(normalizer):
    assert normalizer.normalize({"a": 0.1}, 4) == [0.1, 0.0, 0.0, 0.0]


def test_empty_map_is_all_zeros(normalizer):
    assert normalizer.normalize({}, 3) == [0.0, 0.0, 0.0]


def test_ties_are_broken_by_token(normalizer):
    ranked = normalizer.ranked_terms({"zeta": 0.5, "alpha": 0.5, "mid": 0.7}, 2)
    assert ranked == [("mid", 0.7), ("alpha", 0.5)]


def test_insertion_order_does_not_matter(normalizer):
    forward = {"x": 0.3, "y": 0.3, "z": 0.9, "w": 0.1}
    backward = dict(reversed(list(forward.items())))
    assert normalizer.normalize(forward, 3) == normalizer.normalize(backward, 3)


@pytest.mark.parametrize("size,dim", [(0, 1), (3, 3), (5, 2), (2, 7), (50, 16)])
def test_length_and_content_properties(normalizer, size, dim):
    term_map = {f"t{i:03d}": (i % 9) / 10.0 + 0.05 for i in range(size)}
    vec = normalizer.normalize(term_map, dim)

    assert len(vec) == dim
    assert vec == sorted(vec, reverse=True)
    kept = min(size, dim)
    assert all(v == 0.0 for v in vec[kept:])
    assert vec[:kept] == sorted(term_map.values(), reverse=True)[:kept]


@pytest.mark.parametrize("dim", [0, -1, 2.5, True])
def test_rejects_non_positive_or_non_int_dimension(normalizer, dim):
    with pytest.raises(ValidationFault):
        normalizer.normalize({"a": 1.0}, dim)


@pytest.mark.parametrize("weight", [-0.1, math.inf, math.nan])
def test_rejects_bad_weights(normalizer, weight):
    with pytest.raises(ValidationFault):
        normalizer.normalize({"a": weight}, 2)
