"""ID3 decision-tree classifier for categorical tabular data.

The classifier is created through one of two named constructors:

- `ID3Classifier.train(dataset, target, features)` builds a fresh tree.
- `ID3Classifier.load(snapshot)` restores a previously exported model
  without retraining.

A trained instance owns its tree; nothing is shared between instances. The
tree is only ever replaced as a whole by `import_snapshot`.

Design Note:
    `predict` never raises for an attribute value that was not seen during
    training (or for a missing attribute). It follows the first edge of the
    node instead, and logs the fallback at DEBUG level.
"""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl
from loguru import logger

from id3kit.decision_tree.fitting import TRAIN_FORMS, build_tree, summarize_tree, validate_training_inputs
from id3kit.decision_tree.models import (
    AttributeValue,
    DecisionTreeSnapshot,
    DecisionTreeSummary,
    Record,
    TreeNode,
)
from id3kit.decision_tree.prediction import evaluate, predict, predict_batch
from id3kit.exceptions import ArgumentError
from id3kit.logging import TRAINING_LEVEL
from id3kit.persistence import coerce_snapshot
from id3kit.polars_utils import TabularInput, append_predictions, ensure_records

RECORDS_FORMS: tuple[str, ...] = ("records: Sequence[Mapping[str, value]] | polars.DataFrame | polars.LazyFrame",)


class ID3Classifier:
    """A trained ID3 decision tree with prediction, evaluation and export.

    Examples:
        >>> records = [
        ...     {"outlook": "Sunny", "windy": False, "play": "No"},
        ...     {"outlook": "Overcast", "windy": False, "play": "Yes"},
        ...     {"outlook": "Rain", "windy": True, "play": "No"},
        ...     {"outlook": "Rain", "windy": False, "play": "Yes"},
        ... ]
        >>> clf = ID3Classifier.train(records, "play", ["outlook", "windy"])
        >>> clf.predict({"outlook": "Overcast", "windy": True})
        'Yes'
        >>> clf.evaluate(records)
        1.0

        Restore from an exported snapshot:
        >>> restored = ID3Classifier.load(clf.export())
        >>> restored.predict({"outlook": "Sunny", "windy": False})
        'No'
    """

    def __init__(self, snapshot: DecisionTreeSnapshot) -> None:
        """Initialize the classifier from a validated snapshot.

        Prefer `ID3Classifier.train` or `ID3Classifier.load`.

        Args:
            snapshot (DecisionTreeSnapshot): The model state to own.

        Raises:
            ArgumentError: If `snapshot` is not a `DecisionTreeSnapshot`.
        """
        if not isinstance(snapshot, DecisionTreeSnapshot):
            raise ArgumentError(
                f"ID3Classifier() requires a DecisionTreeSnapshot, got {type(snapshot).__name__}",
                [*TRAIN_FORMS, "load(snapshot)"],
            )
        self._snapshot = snapshot

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def train(cls, dataset: TabularInput, target: str, features: Sequence[str]) -> ID3Classifier:
        """Build a classifier by running ID3 on a labeled dataset.

        The dataset is copied at call time; later changes to the caller's
        records do not affect the trained model.

        Args:
            dataset (TabularInput): Labeled records, as a sequence of mappings
                or a Polars DataFrame.
            target (str): Name of the attribute to predict.
            features (Sequence[str]): Attributes eligible for splitting. Their
                order decides ties between equally informative features.

        Returns:
            ID3Classifier: The trained classifier.

        Raises:
            ArgumentError: If an argument has the wrong shape, `features`
                repeats a name, `features` contains `target`, or a record
                value is not a str, bool, int, float or None.
            DegenerateInputError: If `dataset` is empty.
            FeaturesNotFoundError: If `target` or a feature is absent from every record.
        """
        records = _tabular_records(dataset, TRAIN_FORMS)

        try:
            validate_training_inputs(records, target, features)
        except ValueError as exc:
            logger.warning("Training rejected", target=target, reason=str(exc))
            raise

        feature_list = list(features)
        tree = build_tree(records, target, feature_list)
        snapshot = DecisionTreeSnapshot(tree=tree, dataset=records, target=target, features=feature_list)
        classifier = cls(snapshot)
        logger.log(
            TRAINING_LEVEL,
            "Decision tree trained",
            target=target,
            features=feature_list,
            sample_count=len(records),
            root=classifier._root_label(),
        )
        return classifier

    @classmethod
    def load(cls, snapshot: object) -> ID3Classifier:
        """Restore a classifier from an exported snapshot without retraining.

        Args:
            snapshot (object): A `DecisionTreeSnapshot`, its plain mapping form
                (e.g. decoded JSON), or its JSON text.

        Returns:
            ID3Classifier: A classifier equivalent to the one exported.

        Raises:
            ArgumentError: If `snapshot` is not a supported form.
            MalformedSnapshotError: If the snapshot fails structural validation.
        """
        restored = coerce_snapshot(snapshot)
        classifier = cls(restored)
        logger.log(
            TRAINING_LEVEL,
            "Decision tree loaded",
            target=restored.target,
            features=restored.features,
            sample_count=len(restored.dataset),
        )
        return classifier

    # -------------------------------------------------------------------------
    # Model state
    # -------------------------------------------------------------------------

    @property
    def tree(self) -> TreeNode:
        """Copy of the root node of the trained tree."""
        return self._snapshot.tree.model_copy(deep=True)

    @property
    def target(self) -> str:
        """Name of the target attribute."""
        return self._snapshot.target

    @property
    def features(self) -> tuple[str, ...]:
        """Candidate split attributes, in tie-breaking order."""
        return tuple(self._snapshot.features)

    @property
    def dataset(self) -> tuple[Record, ...]:
        """Copies of the records the tree was trained on."""
        return tuple(dict(record) for record in self._snapshot.dataset)

    def export(self) -> DecisionTreeSnapshot:
        """Export the model state for serialization.

        Use `snapshot.model_dump(mode="json")` for nested dicts and lists, or
        `snapshot.model_dump_json()` for JSON text.

        The snapshot is a deep copy; changing it does not affect this classifier.

        Returns:
            DecisionTreeSnapshot: Tree, training dataset, target and features.
        """
        return self._snapshot.model_copy(deep=True)

    def import_snapshot(self, snapshot: object) -> None:
        """Replace the whole model with the content of `snapshot`.

        The snapshot is validated before anything changes, and the swap is a
        single assignment, so a failed import leaves the current model intact.
        Do not call concurrently with `predict` or `evaluate`.

        Args:
            snapshot (object): Any form accepted by `ID3Classifier.load`.

        Raises:
            ArgumentError: If `snapshot` is not a supported form.
            MalformedSnapshotError: If the snapshot fails structural validation.
        """
        restored = coerce_snapshot(snapshot)
        self._snapshot = restored
        logger.log(
            TRAINING_LEVEL,
            "Decision tree imported",
            target=restored.target,
            features=restored.features,
            sample_count=len(restored.dataset),
        )

    # -------------------------------------------------------------------------
    # Inference
    # -------------------------------------------------------------------------

    def predict(self, record: Record) -> AttributeValue:
        """Predict the target value for one record.

        Unseen or missing attribute values fall back to the first edge of the
        node being traversed; see the module Design Note.

        Args:
            record (Record): Attribute values to classify.

        Returns:
            AttributeValue: The predicted target value.
        """
        return predict(self._snapshot.tree, record)

    def predict_batch(self, records: TabularInput) -> list[AttributeValue]:
        """Predict target values for many records.

        Args:
            records (TabularInput): Records to classify, as mappings or a Polars DataFrame.

        Returns:
            list[AttributeValue]: One prediction per record, in input order.

        Raises:
            ArgumentError: If `records` is not tabular.
        """
        return predict_batch(self._snapshot.tree, _tabular_records(records, RECORDS_FORMS))

    def predict_frame(self, df: pl.DataFrame, *, column_name: str = "prediction") -> pl.DataFrame:
        """Return `df` with a column of predictions appended.

        Args:
            df (pl.DataFrame): Rows to classify.
            column_name (str): Name of the predictions column. Defaults to "prediction".

        Returns:
            pl.DataFrame: A new frame with the predictions column.
        """
        return append_predictions(df, self.predict_batch(df), column_name)

    def evaluate(self, samples: TabularInput) -> float:
        """Compute accuracy against labeled samples.

        Args:
            samples (TabularInput): Records carrying the target attribute.

        Returns:
            float: Fraction of correct predictions, in `[0.0, 1.0]`.

        Raises:
            ArgumentError: If `samples` is not tabular.
            DegenerateInputError: If `samples` is empty.
        """
        records = _tabular_records(samples, RECORDS_FORMS)
        accuracy = evaluate(self._snapshot.tree, self.target, records)
        logger.info("Evaluated decision tree", sample_count=len(records), accuracy=accuracy)
        return accuracy

    def summary(self) -> DecisionTreeSummary:
        """Describe the trained tree as rules, importance scores and shape metadata.

        Returns:
            DecisionTreeSummary: The tree summary.
        """
        return summarize_tree(self._snapshot.tree, self.target, self.features)

    def __repr__(self) -> str:
        """Return a short representation naming the target and root split.

        Returns:
            str: e.g. `"ID3Classifier(target='play', root='outlook')"`.
        """
        return f"{self.__class__.__name__}(target={self.target!r}, root={self._root_label()!r})"

    def _root_label(self) -> str:
        """Return the root split attribute, or the leaf label for a single-leaf tree.

        Returns:
            str: Root description.
        """
        root = self._snapshot.tree
        return root.label if root.node_type == "result" else root.name


def _tabular_records(data: TabularInput, expected_forms: Sequence[str]) -> list[dict[str, AttributeValue]]:
    """Normalize tabular input, reporting a wrong shape as `ArgumentError`.

    Args:
        data (TabularInput): Records or a Polars frame.
        expected_forms (Sequence[str]): Call forms named in the error message.

    Returns:
        list[dict[str, AttributeValue]]: One record dictionary per row.

    Raises:
        ArgumentError: If `data` is not a frame or a sequence of mappings.
    """
    try:
        return ensure_records(data)
    except TypeError as exc:
        logger.warning("Input rejected", reason=str(exc))
        raise ArgumentError(str(exc), expected_forms) from exc
