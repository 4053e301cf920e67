"""Tree traversal for prediction and accuracy evaluation."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
from loguru import logger

from id3kit.decision_tree.models import AttributeValue, FeatureNode, FeatureValueEdge, Record, TreeNode
from id3kit.exceptions import DegenerateInputError


def predict(tree: TreeNode, record: Record) -> AttributeValue:
    """Predict the target value for one record by walking the tree.

    At each feature node the record's value for the split attribute selects
    the edge with an equal value. When no edge matches, because the value was
    never seen in training or the attribute is missing, traversal continues
    down the node's first edge. This fallback is deterministic and never
    raises.

    Args:
        tree (TreeNode): Root of a trained tree.
        record (Record): Attribute values to classify. Extra attributes are ignored.

    Returns:
        AttributeValue: The value of the result node reached.
    """
    node = tree
    while isinstance(node, FeatureNode):
        node = _select_edge(node, record.get(node.name)).child
    return node.value


def predict_batch(tree: TreeNode, records: Iterable[Record]) -> list[AttributeValue]:
    """Predict target values for many records.

    Args:
        tree (TreeNode): Root of a trained tree.
        records (Iterable[Record]): Records to classify.

    Returns:
        list[AttributeValue]: One prediction per record, in input order.
    """
    return [predict(tree, record) for record in records]


def evaluate(tree: TreeNode, target: str, samples: Sequence[Record]) -> float:
    """Compute prediction accuracy over labeled samples.

    Args:
        tree (TreeNode): Root of a trained tree.
        target (str): Target attribute holding each sample's true label.
        samples (Sequence[Record]): Labeled records.

    Returns:
        float: Fraction of samples whose prediction equals `sample[target]`,
            in `[0.0, 1.0]`.

    Raises:
        DegenerateInputError: If `samples` is empty.
    """
    if len(samples) == 0:
        raise DegenerateInputError("Cannot evaluate accuracy on an empty sample list.")
    matches = np.array(
        [predict(tree, sample) == sample.get(target) for sample in samples],
        dtype=np.bool_,
    )
    return float(matches.mean())


def _select_edge(node: FeatureNode, sample_value: AttributeValue) -> FeatureValueEdge:
    """Return the edge whose value equals `sample_value`, or the first edge.

    Args:
        node (FeatureNode): The node being traversed.
        sample_value (AttributeValue): The record's value for `node.name`.

    Returns:
        FeatureValueEdge: The matching edge, or `node.children[0]` when none matches.
    """
    for edge in node.children:
        if edge.value == sample_value:
            return edge
    logger.debug(
        "No edge matches value; falling back to first edge",
        feature=node.name,
        value=sample_value,
        fallback=node.children[0].value,
    )
    return node.children[0]

