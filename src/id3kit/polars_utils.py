"""Utility functions for accepting Polars DataFrames as tabular input."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import polars as pl

from id3kit.decision_tree.models import AttributeValue, Record

type TabularInput = pl.DataFrame | pl.LazyFrame | Sequence[Record]


def ensure_records(data: TabularInput) -> list[dict[str, AttributeValue]]:
    """Normalize tabular input to a list of plain record dictionaries.

    A Polars DataFrame is converted row by row; null cells become `None`.
    A sequence of mappings is shallow-copied so later mutation of the
    caller's records cannot change a trained model.

    Args:
        data (TabularInput): A Polars DataFrame or LazyFrame, or a sequence of mappings.

    Returns:
        list[dict[str, AttributeValue]]: One dictionary per row, in input order.

    Raises:
        TypeError: If `data` is neither a DataFrame nor a sequence of mappings.

    Examples:
        >>> df = pl.DataFrame({"outlook": ["Sunny", "Rain"], "play": ["No", "Yes"]})
        >>> ensure_records(df)
        [{'outlook': 'Sunny', 'play': 'No'}, {'outlook': 'Rain', 'play': 'Yes'}]
    """
    if isinstance(data, pl.LazyFrame):
        data = data.collect()
    if isinstance(data, pl.DataFrame):
        return data.to_dicts()
    if isinstance(data, (str, bytes, Mapping)) or not isinstance(data, Sequence):
        raise TypeError(f"Expected a polars DataFrame or a sequence of mappings, got {type(data).__name__}")
    not_mappings = [index for index, record in enumerate(data) if not isinstance(record, Mapping)]
    if not_mappings:
        raise TypeError(f"Expected every record to be a mapping; rows {not_mappings[:5]} are not")
    return [dict(record) for record in data]


def append_predictions(
    df: pl.DataFrame,
    predictions: Sequence[AttributeValue],
    column_name: str = "prediction",
) -> pl.DataFrame:
    """Return a copy of `df` with a predictions column appended.

    Args:
        df (pl.DataFrame): The frame the predictions were computed from.
        predictions (Sequence[AttributeValue]): One prediction per row of `df`.
        column_name (str): Name of the new column. Defaults to "prediction".

    Returns:
        pl.DataFrame: `df` plus the predictions column.

    Raises:
        ValueError: If `column_name` already exists or the lengths differ.

    Examples:
        >>> df = pl.DataFrame({"outlook": ["Sunny", "Rain"]})
        >>> append_predictions(df, ["No", "Yes"]).columns
        ['outlook', 'prediction']
    """
    if column_name in df.columns:
        raise ValueError(f"Column '{column_name}' already exists in DataFrame")
    if len(predictions) != df.height:
        raise ValueError(f"Expected {df.height} predictions, got {len(predictions)}")
    return df.with_columns(pl.Series(column_name, list(predictions), strict=False))
