"""Pydantic tree nodes, snapshots and rule models for the ID3 decision tree."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type AttributeValue = str | bool | int | float | None

type Record = Mapping[str, AttributeValue]

type TreeNode = ResultNode | FeatureNode

# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------


class ResultNode(BaseModel):
    """Terminal node carrying a predicted target value.

    Attributes:
        node_type (Literal["result"]): Discriminator field; always `"result"`.
        value (AttributeValue): The predicted target value.
        label (str): Display label for `value`.
        sample_size (int): Number of training records that reached this leaf.
        confidence (float): Fraction of those records whose target equals
            `value`. `1.0` for a pure leaf.

    Examples:
        >>> leaf = ResultNode(node_type="result", value="Yes", label="Yes", sample_size=4, confidence=1.0)
        >>> leaf.value
        'Yes'
    """

    model_config = ConfigDict(frozen=True)

    node_type: Literal["result"] = Field(
        default="result",
        description='Discriminator field. Always "result".',
    )
    value: AttributeValue = Field(description="Predicted target value.")
    label: str = Field(description="Display label for the predicted value.")
    sample_size: int = Field(ge=1, description="Number of training records that reached this leaf.")
    confidence: float = Field(
        ge=0.0,
        le=1.0,
        description="Fraction of the leaf's training records whose target equals the predicted value.",
    )


class FeatureValueEdge(BaseModel):
    """Outgoing edge of a feature node for one observed attribute value.

    Attributes:
        value (AttributeValue): The attribute value this edge matches.
        probability (float): Share of the parent's records taking this value.
        sample_size (int): Number of training records routed along this edge.
        child (TreeNode): Subtree reached when the record's value equals `value`.
    """

    model_config = ConfigDict(frozen=True)

    value: AttributeValue = Field(description="Attribute value this edge matches.")
    probability: float = Field(
        ge=0.0,
        le=1.0,
        description="Share of the parent node's training records that take this value.",
    )
    sample_size: int = Field(ge=1, description="Number of training records routed along this edge.")
    child: ResultNode | FeatureNode = Field(
        discriminator="node_type",
        description="Subtree reached when the record's value equals this edge's value.",
    )


class FeatureNode(BaseModel):
    """Internal node splitting on one attribute.

    Attributes:
        node_type (Literal["feature"]): Discriminator field; always `"feature"`.
        name (str): Attribute this node splits on.
        gain (float): Information gain (bits) of the split at this node.
        sample_size (int): Number of training records that reached this node.
        children (list[FeatureValueEdge]): One edge per distinct value observed
            for `name`, in first-occurrence order. Never empty; values unique.
    """

    model_config = ConfigDict(frozen=True)

    node_type: Literal["feature"] = Field(
        default="feature",
        description='Discriminator field. Always "feature".',
    )
    name: str = Field(min_length=1, description="Attribute this node splits on.")
    gain: float = Field(ge=0.0, description="Information gain in bits of the split at this node.")
    sample_size: int = Field(ge=1, description="Number of training records that reached this node.")
    children: list[FeatureValueEdge] = Field(
        min_length=1,
        description="One edge per distinct observed value of the split attribute, in first-occurrence order.",
    )

    @field_validator("children", mode="after")
    @classmethod
    def _validate_unique_edge_values(cls, value: list[FeatureValueEdge]) -> list[FeatureValueEdge]:
        """Validate that no two sibling edges carry the same value.

        Args:
            value (list[FeatureValueEdge]): The edges to validate.

        Returns:
            list[FeatureValueEdge]: The validated edges, unchanged.

        Raises:
            ValueError: If an edge value appears more than once.
        """
        seen: list[AttributeValue] = []
        for edge in value:
            if edge.value in seen:
                raise ValueError(f"duplicate edge value {edge.value!r} among sibling edges")
            seen.append(edge.value)
        return value


FeatureValueEdge.model_rebuild()
FeatureNode.model_rebuild()

# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


class DecisionTreeSnapshot(BaseModel):
    """Serializable state of a trained classifier.

    Holds everything needed to rebuild an equivalent classifier without
    retraining: the tree, the training dataset, the target attribute and the
    ordered feature list.

    Attributes:
        tree (TreeNode): Root node of the trained tree.
        dataset (list[dict[str, AttributeValue]]): The training records.
        target (str): Name of the target attribute.
        features (list[str]): Candidate split attributes in caller order.

    Examples:
        >>> leaf = ResultNode(value="Yes", label="Yes", sample_size=1, confidence=1.0)
        >>> snapshot = DecisionTreeSnapshot(tree=leaf, dataset=[{"play": "Yes"}], target="play", features=[])
        >>> snapshot.model_dump(mode="json")["tree"]["node_type"]
        'result'
    """

    model_config = ConfigDict(frozen=True)

    tree: ResultNode | FeatureNode = Field(
        discriminator="node_type",
        description="Root node of the trained tree.",
    )
    dataset: list[dict[str, AttributeValue]] = Field(
        default_factory=list,
        description="The records the tree was trained on.",
    )
    target: str = Field(min_length=1, description="Name of the target attribute.")
    features: list[str] = Field(
        default_factory=list,
        description="Candidate split attributes, in the order used for tie-breaking.",
    )

    @model_validator(mode="after")
    def _validate_target_not_in_features(self) -> DecisionTreeSnapshot:
        """Validate that the target attribute is not also a feature.

        Returns:
            DecisionTreeSnapshot: The validated model instance.

        Raises:
            ValueError: If `target` appears in `features`.
        """
        if self.target in self.features:
            raise ValueError(f"target '{self.target}' must not appear in features")
        return self

    @model_validator(mode="after")
    def _validate_tree_paths(self) -> DecisionTreeSnapshot:
        """Validate that every split uses a listed feature at most once per path.

        This also bounds the tree depth by `len(features) + 1`.

        Returns:
            DecisionTreeSnapshot: The validated model instance.

        Raises:
            ValueError: If a feature node splits on an unknown attribute or on
                an attribute already used by one of its ancestors.
        """
        _check_paths(self.tree, allowed=frozenset(self.features), used=frozenset())
        return self


def _check_paths(node: TreeNode, *, allowed: frozenset[str], used: frozenset[str]) -> None:
    """Recursively check split attributes along every root-to-leaf path.

    Args:
        node (TreeNode): The subtree to check.
        allowed (frozenset[str]): Attributes a split may use.
        used (frozenset[str]): Attributes already split on by ancestors.

    Raises:
        ValueError: On an unknown or repeated split attribute.
    """
    if isinstance(node, ResultNode):
        return
    if node.name not in allowed:
        raise ValueError(f"tree splits on '{node.name}', which is not in features")
    if node.name in used:
        raise ValueError(f"tree splits on '{node.name}' more than once along one path")
    for edge in node.children:
        _check_paths(edge.child, allowed=allowed, used=used | {node.name})


# ---------------------------------------------------------------------------
# Rules and summary
# ---------------------------------------------------------------------------


class Predicate(BaseModel):
    """An equality condition on one attribute.

    ID3 splits are multiway on discrete values, so every condition along a
    root-to-leaf path has the form `variable == value`.

    Attributes:
        variable (str): Attribute the condition applies to.
        value (AttributeValue): Value the attribute must equal.

    Examples:
        >>> p = Predicate(variable="outlook", value="Sunny")
        >>> str(p)
        'outlook == Sunny'
        >>> p.eval("Rain")
        False
    """

    model_config = ConfigDict(frozen=True)

    variable: str = Field(description="Attribute the condition applies to, e.g. 'outlook'.")
    value: AttributeValue = Field(description="Value the attribute must equal.")

    def __str__(self) -> str:
        """Return a human-readable representation of this predicate.

        Returns:
            str: The predicate as `"<variable> == <value>"`.
        """
        return f"{self.variable} == {self.value}"

    def eval(self, x: AttributeValue) -> bool:
        """Evaluate this predicate against an attribute value.

        Args:
            x (AttributeValue): The attribute value to test.

        Returns:
            bool: `True` if `x` equals the predicate's value.
        """
        return x == self.value


class ClassificationRule(BaseModel):
    """A decision rule extracted from one leaf of the tree.

    Attributes:
        predicates (list[Predicate]): Conditions along the path from the root
            to this leaf. Empty when the tree is a single leaf.
        prediction (AttributeValue): Target value predicted at the leaf.
        samples (int): Number of training records that reached the leaf.
        confidence (float): Fraction of those records carrying `prediction`.

    Examples:
        >>> rule = ClassificationRule(
        ...     predicates=[Predicate(variable="outlook", value="Overcast")],
        ...     prediction="Yes",
        ...     samples=4,
        ...     confidence=1.0,
        ... )
        >>> str(rule)
        'IF outlook == Overcast THEN Yes'
    """

    predicates: list[Predicate] = Field(
        description=(
            "Predicates along the path from root to this leaf. Empty list indicates a single-leaf tree with no splits."
        ),
    )
    prediction: AttributeValue = Field(description="Predicted target value for records reaching this leaf.")
    samples: int = Field(ge=1, description="Number of training records that reached this leaf.")
    confidence: float = Field(
        ge=0.0,
        le=1.0,
        description="Fraction of the leaf's training records carrying the predicted value.",
    )

    def __str__(self) -> str:
        """Return the rule as an IF/THEN sentence.

        Returns:
            str: e.g. `"IF outlook == Sunny AND humidity == High THEN No"`.
        """
        if not self.predicates:
            return f"ALWAYS {self.prediction}"
        conditions = " AND ".join(str(predicate) for predicate in self.predicates)
        return f"IF {conditions} THEN {self.prediction}"


class DecisionTreeSummary(BaseModel):
    """Structured description of a trained tree.

    Attributes:
        target (str): Target attribute name.
        features_used (list[str]): Features that appear in at least one split,
            in the caller's feature order.
        features_unused (list[str]): Features never chosen for a split.
        rules (list[ClassificationRule]): One rule per leaf.
        feature_importance (dict[str, float]): Sample-weighted gain per feature,
            descending, summing to 1.0. Empty when no split has positive gain.
        sample_count (int): Number of training records.
        depth (int): Number of splits on the longest root-to-leaf path.
        leaf_count (int): Number of leaves.
    """

    target: str = Field(description="Target attribute name.")
    features_used: list[str] = Field(description="Features that appear in at least one split.")
    features_unused: list[str] = Field(description="Candidate features never chosen for a split.")
    rules: list[ClassificationRule] = Field(description="One rule per leaf node.")
    feature_importance: dict[str, float] = Field(
        description="Sample-weighted information gain per feature, sorted descending and summing to 1.0.",
    )
    sample_count: int = Field(ge=1, description="Number of training records.")
    depth: int = Field(ge=0, description="Number of splits on the longest root-to-leaf path.")
    leaf_count: int = Field(ge=1, description="Number of leaf nodes.")

    @field_validator("feature_importance", mode="after")
    @classmethod
    def _validate_feature_importance_sums_to_one(cls, value: dict[str, float]) -> dict[str, float]:
        """Validate that non-empty feature importance scores sum to 1.0.

        Args:
            value (dict[str, float]): The feature importance mapping to validate.

        Returns:
            dict[str, float]: The validated mapping, unchanged.

        Raises:
            ValueError: If the scores do not sum to 1.0 within a tolerance of 1e-6.
        """
        if not value:
            return value
        total = sum(value.values())
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"feature_importance scores must sum to 1.0, got {total:.8f}")
        return value

    @model_validator(mode="after")
    def _validate_importance_keys_in_features_used(self) -> DecisionTreeSummary:
        """Validate that every scored feature is one the tree splits on.

        Returns:
            DecisionTreeSummary: The validated model instance.

        Raises:
            ValueError: If `feature_importance` names a feature outside `features_used`.
        """
        extra = set(self.feature_importance) - set(self.features_used)
        if extra:
            raise ValueError(f"feature_importance contains keys not in features_used: {sorted(extra)}")
        return self

    @model_validator(mode="after")
    def _validate_rules_count_matches_leaf_count(self) -> DecisionTreeSummary:
        """Validate that the number of rules equals the number of leaf nodes.

        Returns:
            DecisionTreeSummary: The validated model instance.

        Raises:
            ValueError: If `len(rules)` does not equal `leaf_count`.
        """
        if len(self.rules) != self.leaf_count:
            raise ValueError(f"rules length ({len(self.rules)}) must equal leaf_count ({self.leaf_count})")
        return self
