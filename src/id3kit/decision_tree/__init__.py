"""Decision tree sub-package: node models, information measures, fitting and prediction."""

from __future__ import annotations

from id3kit.decision_tree.fitting import build_tree, extract_rules
from id3kit.decision_tree.information import FeatureGain, entropy, gain, max_gain, most_common
from id3kit.decision_tree.models import (
    AttributeValue,
    ClassificationRule,
    DecisionTreeSnapshot,
    DecisionTreeSummary,
    FeatureNode,
    FeatureValueEdge,
    Predicate,
    Record,
    ResultNode,
    TreeNode,
)
from id3kit.decision_tree.prediction import evaluate, predict

__all__ = [
    "AttributeValue",
    "ClassificationRule",
    "DecisionTreeSnapshot",
    "DecisionTreeSummary",
    "FeatureGain",
    "FeatureNode",
    "FeatureValueEdge",
    "Predicate",
    "Record",
    "ResultNode",
    "TreeNode",
    "build_tree",
    "entropy",
    "evaluate",
    "extract_rules",
    "gain",
    "max_gain",
    "most_common",
    "predict",
]
