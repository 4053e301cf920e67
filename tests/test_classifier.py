"""Tests for the ID3Classifier public API.

Covers training from records and DataFrames, argument validation, export and
restore, atomic snapshot import, batch and DataFrame prediction, and summaries.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import polars as pl
import pytest
from pytest_check import check

from id3kit import (
    ArgumentError,
    DegenerateInputError,
    FeaturesNotFoundError,
    ID3Classifier,
    ID3Error,
    MalformedSnapshotError,
)
from id3kit.decision_tree.models import DecisionTreeSnapshot, FeatureNode, ResultNode


@pytest.fixture
def weather_classifier(weather_records: list[dict], weather_features: list[str]) -> ID3Classifier:
    """Classifier trained on the full weather dataset.

    Args:
        weather_records (list[dict]): The weather dataset fixture.
        weather_features (list[str]): The weather features fixture.

    Returns:
        ID3Classifier: The trained classifier.
    """
    return ID3Classifier.train(weather_records, "play", weather_features)


class TestTrain:
    """Tests for `ID3Classifier.train`."""

    def test_train_from_records(self, weather_classifier: ID3Classifier) -> None:
        """Training on record dicts produces the expected model state.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act / Assert
        with check:
            assert weather_classifier.target == "play"
        with check:
            assert weather_classifier.features == ("outlook", "humidity", "windy")
        with check:
            assert len(weather_classifier.dataset) == 14
        with check:
            assert isinstance(weather_classifier.tree, FeatureNode)
        with check:
            assert weather_classifier.tree.name == "outlook"  # type: ignore[union-attr]

    def test_train_from_dataframe_matches_records(
        self,
        weather_classifier: ID3Classifier,
        weather_frame: pl.DataFrame,
        weather_features: list[str],
    ) -> None:
        """A Polars DataFrame trains the same tree as the equivalent records.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
            weather_frame (pl.DataFrame): The weather dataset as a DataFrame.
            weather_features (list[str]): The weather features fixture.
        """
        # Arrange / Act
        from_frame = ID3Classifier.train(weather_frame, "play", weather_features)

        # Assert
        assert from_frame.tree == weather_classifier.tree

    def test_train_from_lazyframe(self, weather_frame: pl.DataFrame, weather_features: list[str]) -> None:
        """A LazyFrame is collected before training.

        Args:
            weather_frame (pl.DataFrame): The weather dataset as a DataFrame.
            weather_features (list[str]): The weather features fixture.
        """
        # Arrange / Act
        classifier = ID3Classifier.train(weather_frame.lazy(), "play", weather_features)

        # Assert
        assert classifier.predict({"outlook": "Overcast"}) == "Yes"

    def test_feature_order_is_preserved(self, weather_records: list[dict]) -> None:
        """The caller's feature order is kept, not sorted.

        Args:
            weather_records (list[dict]): The weather dataset fixture.
        """
        # Arrange / Act
        classifier = ID3Classifier.train(weather_records, "play", ["windy", "outlook", "humidity"])

        # Assert
        assert classifier.features == ("windy", "outlook", "humidity")

    def test_later_mutation_of_caller_records_does_not_leak(self, weather_features: list[str]) -> None:
        """The classifier keeps its own copy of the training records.

        Args:
            weather_features (list[str]): The weather features fixture.
        """
        # Arrange
        records = [
            {"outlook": "Sunny", "humidity": "High", "windy": False, "play": "No"},
            {"outlook": "Overcast", "humidity": "High", "windy": False, "play": "Yes"},
        ]
        classifier = ID3Classifier.train(records, "play", weather_features)

        # Act
        records[0]["play"] = "Yes"
        records.append({"outlook": "Rain", "play": "Yes"})

        # Assert
        with check:
            assert classifier.dataset[0]["play"] == "No"
        with check:
            assert len(classifier.dataset) == 2

    def test_pure_dataset_trains_single_leaf(self) -> None:
        """A single-class dataset trains a single-leaf tree."""
        # Arrange
        records = [{"colour": "red", "label": "a"}, {"colour": "blue", "label": "a"}]

        # Act
        classifier = ID3Classifier.train(records, "label", ["colour"])

        # Assert
        with check:
            assert isinstance(classifier.tree, ResultNode)
        with check:
            assert classifier.predict({"colour": "green"}) == "a"

    def test_empty_dataset_raises_degenerate_input_error(self) -> None:
        """Training on zero records is rejected."""
        # Arrange / Act / Assert
        with pytest.raises(DegenerateInputError):
            ID3Classifier.train([], "play", ["outlook"])

    def test_missing_feature_raises_features_not_found_error(self, weather_records: list[dict]) -> None:
        """A feature absent from every record is reported.

        Args:
            weather_records (list[dict]): The weather dataset fixture.
        """
        # Arrange / Act / Assert
        with pytest.raises(FeaturesNotFoundError, match="temperature"):
            ID3Classifier.train(weather_records, "play", ["outlook", "temperature"])

    @pytest.mark.parametrize(
        "dataset",
        [
            "outlook,play",
            {"outlook": "Sunny", "play": "No"},
            42,
            [{"outlook": "Sunny", "play": "No"}, "Rain"],
        ],
        ids=["string", "single-mapping", "integer", "non-mapping-row"],
    )
    def test_malformed_dataset_raises_argument_error(self, dataset: object) -> None:
        """A dataset that is not tabular is rejected with the accepted forms.

        Args:
            dataset (object): Invalid dataset argument.
        """
        # Arrange / Act
        with pytest.raises(ArgumentError) as exc_info:
            ID3Classifier.train(dataset, "play", ["outlook"])  # type: ignore[arg-type]

        # Assert
        with check:
            assert len(exc_info.value.expected_forms) > 0
        with check:
            assert "Expected one of" in str(exc_info.value)

    def test_target_in_features_raises_argument_error(self, weather_records: list[dict]) -> None:
        """The target cannot be a split candidate.

        Args:
            weather_records (list[dict]): The weather dataset fixture.
        """
        # Arrange / Act / Assert
        with pytest.raises(ArgumentError):
            ID3Classifier.train(weather_records, "play", ["play", "outlook"])

    def test_all_errors_share_base_class(self) -> None:
        """Every id3kit failure can be caught as ID3Error."""
        # Arrange / Act / Assert
        with pytest.raises(ID3Error):
            ID3Classifier.train([], "play", ["outlook"])

    def test_constructor_rejects_non_snapshot(self) -> None:
        """Direct construction requires a snapshot."""
        # Arrange / Act / Assert
        with pytest.raises(ArgumentError, match="DecisionTreeSnapshot"):
            ID3Classifier(42)  # type: ignore[arg-type]


class TestPredictAndEvaluate:
    """Tests for prediction and evaluation through the classifier."""

    def test_predict_overcast_is_yes(self, weather_classifier: ID3Classifier) -> None:
        """Overcast days are always play days.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act / Assert
        assert weather_classifier.predict({"outlook": "Overcast", "humidity": "High", "windy": True}) == "Yes"

    def test_predict_unseen_value_does_not_raise(self, weather_classifier: ID3Classifier) -> None:
        """Unseen values fall back to the first edge.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act / Assert
        assert weather_classifier.predict({"outlook": "Hail", "humidity": "Normal"}) == "Yes"

    def test_predict_batch_from_dataframe(
        self, weather_classifier: ID3Classifier, weather_frame: pl.DataFrame, weather_records: list[dict]
    ) -> None:
        """Batch prediction over a DataFrame returns the training labels.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
            weather_frame (pl.DataFrame): The weather dataset as a DataFrame.
            weather_records (list[dict]): The weather dataset fixture.
        """
        # Arrange / Act
        predictions = weather_classifier.predict_batch(weather_frame)

        # Assert
        assert predictions == [record["play"] for record in weather_records]

    def test_predict_frame_appends_column(self, weather_classifier: ID3Classifier, weather_frame: pl.DataFrame) -> None:
        """`predict_frame` returns the frame plus a predictions column.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
            weather_frame (pl.DataFrame): The weather dataset as a DataFrame.
        """
        # Arrange
        df = weather_frame.drop("play")

        # Act
        result = weather_classifier.predict_frame(df, column_name="predicted_play")

        # Assert
        with check:
            assert result.columns == ["outlook", "humidity", "windy", "predicted_play"]
        with check:
            assert result["predicted_play"].to_list() == weather_frame["play"].to_list()
        with check:
            assert "predicted_play" not in df.columns

    def test_evaluate_on_training_data_is_perfect(
        self, weather_classifier: ID3Classifier, weather_frame: pl.DataFrame
    ) -> None:
        """Training accuracy on the contradiction-free weather data is 1.0.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
            weather_frame (pl.DataFrame): The weather dataset as a DataFrame.
        """
        # Arrange / Act / Assert
        assert weather_classifier.evaluate(weather_frame) == 1.0

    def test_evaluate_empty_samples_raises(self, weather_classifier: ID3Classifier) -> None:
        """Evaluating on zero samples raises instead of returning NaN.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act / Assert
        with pytest.raises(DegenerateInputError):
            weather_classifier.evaluate([])


class TestExportAndLoad:
    """Tests for export, load and import_snapshot."""

    def test_export_is_idempotent(self, weather_classifier: ID3Classifier) -> None:
        """Exporting twice without changes yields equal snapshots.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act
        first = weather_classifier.export()
        second = weather_classifier.export()

        # Assert
        assert first.model_dump(mode="json") == second.model_dump(mode="json")

    def test_export_contains_model_state(self, weather_classifier: ID3Classifier) -> None:
        """The exported mapping holds tree, dataset, target and features.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act
        data = weather_classifier.export().model_dump(mode="json")

        # Assert
        with check:
            assert set(data) == {"tree", "dataset", "target", "features"}
        with check:
            assert data["tree"]["node_type"] == "feature"
        with check:
            assert data["features"] == ["outlook", "humidity", "windy"]

    @pytest.mark.parametrize("form", ["snapshot", "mapping", "json_text", "json_bytes"])
    def test_load_round_trip_preserves_predictions(
        self, weather_classifier: ID3Classifier, weather_records: list[dict], form: str
    ) -> None:
        """Every supported snapshot form restores an equivalent classifier.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
            weather_records (list[dict]): The weather dataset fixture.
            form (str): Snapshot form to load from.
        """
        # Arrange
        snapshot = weather_classifier.export()
        payload = {
            "snapshot": snapshot,
            "mapping": json.loads(snapshot.model_dump_json()),
            "json_text": snapshot.model_dump_json(),
            "json_bytes": snapshot.model_dump_json().encode("utf-8"),
        }[form]

        # Act
        restored = ID3Classifier.load(payload)

        # Assert
        with check:
            assert restored.tree == weather_classifier.tree
        with check:
            assert restored.predict_batch(weather_records) == weather_classifier.predict_batch(weather_records)
        with check:
            assert restored.export().model_dump(mode="json") == snapshot.model_dump(mode="json")

    def test_load_rejects_unsupported_form(self) -> None:
        """A non-snapshot argument raises ArgumentError listing accepted forms."""
        # Arrange / Act
        with pytest.raises(ArgumentError) as exc_info:
            ID3Classifier.load(42)

        # Assert
        assert len(exc_info.value.expected_forms) == 3

    def test_load_rejects_malformed_snapshot(self, weather_classifier: ID3Classifier) -> None:
        """A snapshot whose tree is broken fails eagerly.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange
        data = weather_classifier.export().model_dump(mode="json")
        data["tree"]["children"] = []

        # Act / Assert
        with pytest.raises(MalformedSnapshotError):
            ID3Classifier.load(data)

    def test_import_snapshot_replaces_model(self, weather_classifier: ID3Classifier) -> None:
        """Importing a snapshot swaps in the other model wholesale.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange
        other = ID3Classifier.train([{"colour": "red", "label": "a"}], "label", ["colour"])

        # Act
        weather_classifier.import_snapshot(other.export().model_dump(mode="json"))

        # Assert
        with check:
            assert weather_classifier.target == "label"
        with check:
            assert weather_classifier.features == ("colour",)
        with check:
            assert weather_classifier.predict({"outlook": "Overcast"}) == "a"

    def test_failed_import_leaves_model_intact(self, weather_classifier: ID3Classifier) -> None:
        """A rejected snapshot leaves the previous model untouched.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange
        before = weather_classifier.export()
        bad = before.model_dump(mode="json")
        bad["features"] = ["outlook", "play"]

        # Act
        with pytest.raises(MalformedSnapshotError):
            weather_classifier.import_snapshot(bad)

        # Assert
        with check:
            assert weather_classifier.export() == before
        with check:
            assert weather_classifier.predict({"outlook": "Overcast"}) == "Yes"

    def test_snapshot_booleans_survive_json(self, weather_classifier: ID3Classifier) -> None:
        """Boolean edge values stay booleans through a JSON round trip.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange
        restored = ID3Classifier.load(weather_classifier.export().model_dump_json())

        # Act
        rain = restored.tree.children[2].child  # type: ignore[union-attr]

        # Assert
        assert [edge.value for edge in rain.children] == [False, True]  # type: ignore[union-attr]

    def test_exported_snapshot_is_a_model(self, weather_classifier: ID3Classifier) -> None:
        """`export` returns the pydantic snapshot model.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act / Assert
        assert isinstance(weather_classifier.export(), DecisionTreeSnapshot)


class TestSummaryAndRepr:
    """Tests for `summary` and `__repr__`."""

    def test_summary_describes_weather_tree(self, weather_classifier: ID3Classifier) -> None:
        """The summary reports rules, feature usage and shape.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act
        summary = weather_classifier.summary()

        # Assert
        with check:
            assert summary.depth == 2
        with check:
            assert summary.leaf_count == 5
        with check:
            assert str(summary.rules[2]) == "IF outlook == Overcast THEN Yes"
        with check:
            assert summary.sample_count == 14

    def test_repr_names_target_and_root(self, weather_classifier: ID3Classifier) -> None:
        """The representation shows the target and root split.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange / Act / Assert
        assert repr(weather_classifier) == "ID3Classifier(target='play', root='outlook')"

    def test_repr_of_single_leaf_uses_label(self) -> None:
        """A single-leaf tree's representation names its leaf label."""
        # Arrange
        classifier = ID3Classifier.train([{"label": "a"}], "label", [])

        # Act / Assert
        assert repr(classifier) == "ID3Classifier(target='label', root='a')"


class TestModelIsolation:
    """Tests that exported and exposed state cannot alter a trained classifier."""

    def test_mutating_exported_snapshot_leaves_model_intact(
        self, weather_classifier: ID3Classifier, weather_records: list[dict]
    ) -> None:
        """Changing an exported snapshot in place changes neither predictions nor later exports.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
            weather_records (list[dict]): The weather dataset fixture.
        """
        # Arrange
        before = weather_classifier.export().model_dump(mode="json")
        exported = weather_classifier.export()

        # Act
        exported.tree.children.clear()  # type: ignore[union-attr]
        exported.dataset[0]["play"] = "Maybe"
        exported.features.append("temperature")

        # Assert
        with check:
            assert weather_classifier.predict({"outlook": "Overcast"}) == "Yes"
        with check:
            assert weather_classifier.evaluate(weather_records) == 1.0
        with check:
            assert weather_classifier.export().model_dump(mode="json") == before

    def test_mutating_tree_and_dataset_properties_leaves_model_intact(self, weather_classifier: ID3Classifier) -> None:
        """The `tree` and `dataset` properties hand out copies.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange
        tree = weather_classifier.tree
        dataset = weather_classifier.dataset

        # Act
        tree.children.clear()  # type: ignore[union-attr]
        dataset[0]["play"] = "Maybe"  # type: ignore[index]

        # Assert
        with check:
            assert len(weather_classifier.tree.children) == 3  # type: ignore[union-attr]
        with check:
            assert weather_classifier.dataset[0]["play"] == "No"
        with check:
            assert weather_classifier.predict({"outlook": "Sunny", "humidity": "Normal"}) == "Yes"

    def test_mutating_loaded_snapshot_leaves_model_intact(self, weather_classifier: ID3Classifier) -> None:
        """A classifier loaded from a snapshot instance does not share it.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
        """
        # Arrange
        snapshot = weather_classifier.export()
        restored = ID3Classifier.load(snapshot)

        # Act
        snapshot.tree.children.clear()  # type: ignore[union-attr]

        # Assert
        assert restored.predict({"outlook": "Overcast"}) == "Yes"


class TestUnsupportedValues:
    """Tests for record values outside str, bool, int, float and None."""

    def test_date_column_raises_argument_error(self) -> None:
        """A polars Date column is rejected with the attribute name and type."""
        # Arrange
        df = pl.DataFrame({
            "day": [date(2024, 1, 1), date(2024, 1, 2)],
            "play": ["No", "Yes"],
        })

        # Act
        with pytest.raises(ArgumentError) as exc_info:
            ID3Classifier.train(df, "play", ["day"])

        # Assert
        with check:
            assert "'day'" in str(exc_info.value)
        with check:
            assert "date" in str(exc_info.value)

    def test_date_column_cast_to_string_trains(self) -> None:
        """Casting a Date column to strings makes it a usable categorical feature."""
        # Arrange
        df = pl.DataFrame({
            "day": [date(2024, 1, 1), date(2024, 1, 2)],
            "play": ["No", "Yes"],
        }).with_columns(pl.col("day").cast(pl.String))

        # Act
        classifier = ID3Classifier.train(df, "play", ["day"])

        # Assert
        assert classifier.predict({"day": "2024-01-02"}) == "Yes"

    def test_decimal_in_unused_attribute_raises_argument_error(self) -> None:
        """Every stored attribute must be a supported scalar, not only the features."""
        # Arrange
        records = [
            {"colour": "red", "price": Decimal("1.50"), "label": "a"},
            {"colour": "blue", "price": Decimal("2.00"), "label": "b"},
        ]

        # Act / Assert
        with pytest.raises(ArgumentError, match="price"):
            ID3Classifier.train(records, "label", ["colour"])


class TestInputShapes:
    """Tests that prediction and evaluation report wrong input shapes as ArgumentError."""

    @pytest.mark.parametrize("records", ["outlook", 42, [{"outlook": "Sunny"}, "Rain"]])
    def test_predict_batch_rejects_non_tabular_input(
        self, weather_classifier: ID3Classifier, records: object
    ) -> None:
        """`predict_batch` raises ArgumentError listing the accepted forms.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
            records (object): Invalid records argument.
        """
        # Arrange / Act
        with pytest.raises(ArgumentError) as exc_info:
            weather_classifier.predict_batch(records)  # type: ignore[arg-type]

        # Assert
        assert len(exc_info.value.expected_forms) == 1

    @pytest.mark.parametrize("samples", [{"outlook": "Sunny", "play": "No"}, 3.5])
    def test_evaluate_rejects_non_tabular_input(self, weather_classifier: ID3Classifier, samples: object) -> None:
        """`evaluate` raises an ID3Error subclass rather than a bare TypeError.

        Args:
            weather_classifier (ID3Classifier): Trained weather classifier.
            samples (object): Invalid samples argument.
        """
        # Arrange / Act / Assert
        with pytest.raises(ArgumentError):
            weather_classifier.evaluate(samples)  # type: ignore[arg-type]
