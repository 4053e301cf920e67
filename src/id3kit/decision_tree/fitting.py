"""ID3 tree construction, input validation, rule extraction and tree summaries."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from loguru import logger

from id3kit.decision_tree.information import max_gain, most_common, partition
from id3kit.decision_tree.models import (
    AttributeValue,
    ClassificationRule,
    DecisionTreeSummary,
    FeatureNode,
    FeatureValueEdge,
    Predicate,
    Record,
    ResultNode,
    TreeNode,
)
from id3kit.exceptions import ArgumentError, DegenerateInputError, FeaturesNotFoundError

_IMPORTANCE_DECIMAL_PLACES: int = 4

_SCALAR_TYPES: tuple[type, ...] = (str, bool, int, float)

TRAIN_FORMS: tuple[str, ...] = (
    "train(dataset: Sequence[Mapping[str, value]] | polars.DataFrame, target: str, features: Sequence[str])",
)


# ---------------------------------------------------------------------------
# Public interface -- Tree construction
# ---------------------------------------------------------------------------


def build_tree(dataset: Sequence[Record], target: str, features: Sequence[str]) -> TreeNode:
    """Recursively build an ID3 decision tree.

    1. If every record shares one target value, return a pure leaf.
    2. If no features remain, return a leaf holding the majority target value.
    3. Otherwise split on the maximum-gain feature, one edge per distinct
       value in first-occurrence order, and recurse on each partition with
       that feature removed.

    Args:
        dataset (Sequence[Record]): Training records reaching this node.
        target (str): Target attribute name.
        features (Sequence[str]): Remaining candidate features, in priority order.

    Returns:
        TreeNode: Root of the (sub)tree.

    Raises:
        DegenerateInputError: If `dataset` is empty.
    """
    if not dataset:
        raise DegenerateInputError("Cannot build a decision tree from an empty dataset.")

    targets = [record.get(target) for record in dataset]
    if _is_pure(targets):
        return _make_leaf(targets[0], targets)

    if not features:
        return _make_leaf(most_common(targets), targets)

    best = max_gain(dataset, target, features)
    remaining_features = [feature for feature in features if feature != best.name]
    groups = partition(dataset, best.name)
    logger.debug(
        "Splitting on feature",
        feature=best.name,
        gain=round(best.gain, 6),
        sample_size=len(dataset),
        branches=len(groups),
    )

    edges = [
        FeatureValueEdge(
            value=value,
            probability=len(subset) / len(dataset),
            sample_size=len(subset),
            child=build_tree(subset, target, remaining_features),
        )
        for value, subset in groups.items()
    ]
    return FeatureNode(name=best.name, gain=best.gain, sample_size=len(dataset), children=edges)


def validate_training_inputs(dataset: Sequence[Record], target: object, features: object) -> None:
    """Validate the arguments of the public training entry point.

    Args:
        dataset (Sequence[Record]): Training records, already normalized to mappings.
        target (object): Target attribute name; must be a non-empty string.
        features (object): Candidate feature names; must be a sequence of
            distinct strings that excludes `target`.

    Raises:
        ArgumentError: If `target` or `features` has the wrong shape, `features`
            repeats a name, `features` contains `target`, or a record holds a
            value that is not a str, bool, int, float or None.
        DegenerateInputError: If `dataset` is empty.
        FeaturesNotFoundError: If `target` or a feature is absent from every record.
    """
    if not isinstance(target, str) or not target:
        raise ArgumentError(f"`target` must be a non-empty string, got {target!r}", TRAIN_FORMS)
    if isinstance(features, str) or not isinstance(features, Sequence):
        raise ArgumentError(f"`features` must be a sequence of strings, got {type(features).__name__}", TRAIN_FORMS)
    non_string = [feature for feature in features if not isinstance(feature, str)]
    if non_string:
        raise ArgumentError(f"`features` must contain only strings, got {non_string!r}", TRAIN_FORMS)
    duplicates = sorted({feature for feature in features if features.count(feature) > 1})
    if duplicates:
        raise ArgumentError(f"`features` contains duplicate names: {duplicates}")
    if target in features:
        raise ArgumentError(f"`features` must not contain the target attribute '{target}'")
    if not dataset:
        raise DegenerateInputError("Cannot train on an empty dataset.")

    available = _attribute_names(dataset)
    missing = [name for name in [target, *features] if name not in available]
    if missing:
        raise FeaturesNotFoundError(missing_features=missing, available_attributes=available)
    _check_value_types(dataset)


# ---------------------------------------------------------------------------
# Public interface -- Introspection
# ---------------------------------------------------------------------------


def extract_rules(tree: TreeNode) -> list[ClassificationRule]:
    """Extract one human-readable rule per leaf of the tree.

    Leaves are visited depth-first following edge order, so rules appear in
    the same order a reader would trace the tree.

    Args:
        tree (TreeNode): Root of a trained tree.

    Returns:
        list[ClassificationRule]: One rule per leaf.
    """
    rules: list[ClassificationRule] = []
    _walk_tree(tree, path_predicates=[], rules=rules)
    return rules


def compute_feature_importance(tree: TreeNode) -> dict[str, float]:
    """Score features by the sample-weighted information gain of their splits.

    Each split contributes `gain * sample_size / root_sample_size`. Scores are
    normalized to sum to 1.0 and sorted descending. Features whose splits all
    have zero gain are left out.

    Args:
        tree (TreeNode): Root of a trained tree.

    Returns:
        dict[str, float]: Feature to rounded importance score. Empty when the
            tree is a single leaf or no split has positive gain.
    """
    if isinstance(tree, ResultNode):
        return {}
    contributions: dict[str, float] = {}
    _accumulate_importance(tree, root_size=tree.sample_size, contributions=contributions)
    names = [name for name, score in contributions.items() if score > 0.0]
    if not names:
        return {}
    scores = np.array([contributions[name] for name in names], dtype=np.float64)
    normalized = np.round(scores / scores.sum(), _IMPORTANCE_DECIMAL_PLACES)
    paired = sorted(zip(names, normalized.tolist(), strict=True), key=lambda item: item[1], reverse=True)
    # Absorb rounding drift into the last entry so the scores sum to exactly 1.0.
    others_sum = sum(score for _, score in paired[:-1])
    paired[-1] = (paired[-1][0], round(1.0 - others_sum, _IMPORTANCE_DECIMAL_PLACES))
    return dict(paired)


def tree_depth(tree: TreeNode) -> int:
    """Return the number of splits on the longest root-to-leaf path.

    Args:
        tree (TreeNode): Root of a tree.

    Returns:
        int: `0` for a single leaf.
    """
    if isinstance(tree, ResultNode):
        return 0
    return 1 + max(tree_depth(edge.child) for edge in tree.children)


def leaf_count(tree: TreeNode) -> int:
    """Return the number of result nodes in the tree.

    Args:
        tree (TreeNode): Root of a tree.

    Returns:
        int: Number of leaves; at least 1.
    """
    if isinstance(tree, ResultNode):
        return 1
    return sum(leaf_count(edge.child) for edge in tree.children)


def summarize_tree(tree: TreeNode, target: str, features: Sequence[str]) -> DecisionTreeSummary:
    """Assemble a structured summary of a trained tree.

    Args:
        tree (TreeNode): Root of a trained tree.
        target (str): Target attribute name.
        features (Sequence[str]): Candidate features the tree was trained with.

    Returns:
        DecisionTreeSummary: Rules, importance scores and shape metadata.
    """
    split_features = _split_features(tree)
    return DecisionTreeSummary(
        target=target,
        features_used=[feature for feature in features if feature in split_features],
        features_unused=[feature for feature in features if feature not in split_features],
        rules=extract_rules(tree),
        feature_importance=compute_feature_importance(tree),
        sample_count=tree.sample_size,
        depth=tree_depth(tree),
        leaf_count=leaf_count(tree),
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _is_pure(targets: list[AttributeValue]) -> bool:
    """Return True when every target value equals the first one.

    Args:
        targets (list[AttributeValue]): Non-empty list of target values.

    Returns:
        bool: Whether the list holds a single distinct value.
    """
    first = targets[0]
    return all(value == first for value in targets)


def _make_leaf(value: AttributeValue, targets: list[AttributeValue]) -> ResultNode:
    """Create a result node predicting `value` for the records behind `targets`.

    Args:
        value (AttributeValue): The predicted target value.
        targets (list[AttributeValue]): Target values of the records reaching the leaf.

    Returns:
        ResultNode: The leaf, with its sample size and confidence filled in.
    """
    matching = sum(1 for target in targets if target == value)
    return ResultNode(
        value=value,
        label=str(value),
        sample_size=len(targets),
        confidence=round(matching / len(targets), 4),
    )


def _check_value_types(dataset: Sequence[Record]) -> None:
    """Reject record values outside the scalar types a snapshot can hold.

    Snapshots round-trip through JSON, so only JSON scalars are accepted.
    Dates, decimals and other objects must be converted by the caller first,
    e.g. with `pl.col("day").cast(pl.String)`.

    Args:
        dataset (Sequence[Record]): Records to scan.

    Raises:
        ArgumentError: On the first record value of an unsupported type.
    """
    for index, record in enumerate(dataset):
        for name, value in record.items():
            if value is not None and not isinstance(value, _SCALAR_TYPES):
                raise ArgumentError(
                    f"Attribute '{name}' in record {index} holds {type(value).__name__} value {value!r};"
                    " values must be str, bool, int, float or None",
                    TRAIN_FORMS,
                )


def _attribute_names(dataset: Sequence[Record]) -> list[str]:
    """Collect attribute names across all records, in first-occurrence order.

    Args:
        dataset (Sequence[Record]): Records to scan.

    Returns:
        list[str]: Every attribute name present in at least one record.
    """
    names: dict[str, None] = {}
    for record in dataset:
        names.update(dict.fromkeys(record))
    return list(names)


def _walk_tree(
    node: TreeNode,
    *,
    path_predicates: list[Predicate],
    rules: list[ClassificationRule],
) -> None:
    """Recursively walk the tree and accumulate one rule per leaf.

    Args:
        node (TreeNode): The current node.
        path_predicates (list[Predicate]): Predicates from the root to `node`.
        rules (list[ClassificationRule]): Accumulator; leaf rules are appended in place.
    """
    if isinstance(node, ResultNode):
        rules.append(
            ClassificationRule(
                predicates=path_predicates,
                prediction=node.value,
                samples=node.sample_size,
                confidence=node.confidence,
            )
        )
        return
    for edge in node.children:
        predicate = Predicate(variable=node.name, value=edge.value)
        _walk_tree(edge.child, path_predicates=[*path_predicates, predicate], rules=rules)


def _accumulate_importance(node: TreeNode, *, root_size: int, contributions: dict[str, float]) -> None:
    """Add each split's weighted gain to `contributions`.

    Args:
        node (TreeNode): The current node.
        root_size (int): Sample size at the root, used as the weight denominator.
        contributions (dict[str, float]): Accumulator keyed by feature name.
    """
    if isinstance(node, ResultNode):
        return
    weighted = node.gain * node.sample_size / root_size
    contributions[node.name] = contributions.get(node.name, 0.0) + weighted
    for edge in node.children:
        _accumulate_importance(edge.child, root_size=root_size, contributions=contributions)


def _split_features(tree: TreeNode) -> set[str]:
    """Return the set of attributes the tree splits on anywhere.

    Args:
        tree (TreeNode): Root of a tree.

    Returns:
        set[str]: Split attribute names.
    """
    if isinstance(tree, ResultNode):
        return set()
    names = {tree.name}
    for edge in tree.children:
        names |= _split_features(edge.child)
    return names
