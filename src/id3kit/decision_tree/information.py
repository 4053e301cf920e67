"""Entropy and information-gain computations for ID3 split selection.

All functions here are pure: they read records and return numbers, and never
mutate their inputs.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import NamedTuple

import numpy as np

from id3kit.decision_tree.models import AttributeValue, Record

# Gains closer than this are treated as equal.
_GAIN_TIE_TOLERANCE: float = 1e-12


class FeatureGain(NamedTuple):
    """The winning split attribute and its information gain.

    Attributes:
        name (str): Attribute name.
        gain (float): Information gain in bits.
    """

    name: str
    gain: float


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def entropy(values: Sequence[AttributeValue]) -> float:
    """Compute the Shannon entropy, in bits, of a sequence of discrete values.

    Args:
        values (Sequence[AttributeValue]): Target values, one per record.

    Returns:
        float: `-sum(p * log2(p))` over distinct values. `0.0` for an empty
            sequence or a sequence with a single distinct value.

    Examples:
        >>> entropy(["Yes", "No"])
        1.0
        >>> entropy(["Yes", "Yes", "Yes"])
        0.0
        >>> entropy([])
        0.0
    """
    if len(values) == 0:
        return 0.0
    counts = np.array(_value_counts(values), dtype=np.float64)
    if counts.size == 1:
        return 0.0
    probabilities = counts / counts.sum()
    return float(-np.sum(probabilities * np.log2(probabilities)))


def gain(dataset: Sequence[Record], target: str, feature: str) -> float:
    """Compute the information gain of splitting `dataset` on `feature`.

    Args:
        dataset (Sequence[Record]): Records to split.
        target (str): Target attribute name.
        feature (str): Candidate split attribute name.

    Returns:
        float: `entropy(targets) - sum(|subset| / |dataset| * entropy(subset targets))`
            over the distinct values of `feature`. Never negative; `0.0` for
            an empty dataset.
    """
    set_size = len(dataset)
    if set_size == 0:
        return 0.0
    set_entropy = entropy([record.get(target) for record in dataset])
    weighted_entropy = 0.0
    for subset in partition(dataset, feature).values():
        weighted_entropy += (len(subset) / set_size) * entropy([record.get(target) for record in subset])
    # Rounding can leave a residue just below zero when the split is uninformative.
    return max(set_entropy - weighted_entropy, 0.0)


def max_gain(dataset: Sequence[Record], target: str, candidate_features: Iterable[str]) -> FeatureGain:
    """Select the candidate feature with the highest information gain.

    Ties go to the feature that comes first in `candidate_features`; no
    secondary criterion is applied.

    Args:
        dataset (Sequence[Record]): Records to split.
        target (str): Target attribute name.
        candidate_features (Iterable[str]): Features to consider, in priority order.

    Returns:
        FeatureGain: The winning feature and its gain.

    Raises:
        ValueError: If `candidate_features` is empty.
    """
    best: FeatureGain | None = None
    for feature in candidate_features:
        feature_gain = gain(dataset, target, feature)
        if best is None or _strictly_greater(feature_gain, best.gain):
            best = FeatureGain(name=feature, gain=feature_gain)
    if best is None:
        raise ValueError("candidate_features must contain at least one feature")
    return best


def most_common(values: Iterable[AttributeValue]) -> AttributeValue:
    """Return the most frequent value, breaking ties by first arrival at the maximum.

    Values are scanned in order and a running count is kept; the first value
    whose count exceeds every count seen so far becomes the answer.

    Args:
        values (Iterable[AttributeValue]): Values to vote over.

    Returns:
        AttributeValue: The majority value.

    Raises:
        ValueError: If `values` is empty.

    Examples:
        >>> most_common(["No", "Yes", "Yes", "No"])
        'Yes'
    """
    frequencies: dict[AttributeValue, int] = {}
    best_value: AttributeValue = None
    best_count = 0
    for value in values:
        count = frequencies.get(value, 0) + 1
        frequencies[value] = count
        if count > best_count:
            best_value, best_count = value, count
    if best_count == 0:
        raise ValueError("most_common() requires at least one value")
    return best_value


def partition(dataset: Sequence[Record], feature: str) -> dict[AttributeValue, list[Record]]:
    """Group records by their value of `feature`, preserving first-occurrence order.

    A record that lacks `feature` is grouped under `None`.

    Args:
        dataset (Sequence[Record]): Records to group.
        feature (str): Attribute to group by.

    Returns:
        dict[AttributeValue, list[Record]]: Value to records, keys in the
            order each value first appears in `dataset`.
    """
    groups: dict[AttributeValue, list[Record]] = {}
    for record in dataset:
        groups.setdefault(record.get(feature), []).append(record)
    return groups


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _value_counts(values: Iterable[AttributeValue]) -> list[int]:
    """Count occurrences of each distinct value.

    Args:
        values (Iterable[AttributeValue]): Values to count.

    Returns:
        list[int]: Counts in first-occurrence order.
    """
    frequencies: dict[AttributeValue, int] = {}
    for value in values:
        frequencies[value] = frequencies.get(value, 0) + 1
    return list(frequencies.values())


def _strictly_greater(candidate: float, incumbent: float) -> bool:
    """Return True when `candidate` beats `incumbent` by more than rounding noise.

    Args:
        candidate (float): Gain of the feature under consideration.
        incumbent (float): Best gain seen so far.

    Returns:
        bool: Whether the candidate should replace the incumbent.
    """
    return candidate > incumbent and not math.isclose(candidate, incumbent, rel_tol=0.0, abs_tol=_GAIN_TIE_TOLERANCE)
