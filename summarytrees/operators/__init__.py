"""Entropy accounting and weight transforms."""

from .entropy import (
    allocation_entropy,
    expansion_gain,
    exposure_gain,
    local_split_entropy,
    piece_term,
    shannon_entropy,
    split_gain,
)
from .rounding import (
    WeightTransform,
    identity_transform,
    round_up_weights,
    rounding_fraction,
    rounding_transform,
    rounding_unit,
)

__all__ = [
    "WeightTransform",
    "allocation_entropy",
    "expansion_gain",
    "exposure_gain",
    "identity_transform",
    "local_split_entropy",
    "piece_term",
    "round_up_weights",
    "rounding_fraction",
    "rounding_transform",
    "rounding_unit",
    "shannon_entropy",
    "split_gain",
]
