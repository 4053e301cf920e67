"""Snapshot validation, restoration and file persistence for ID3Classifier.

A snapshot is the plain structure returned by `ID3Classifier.export()`: the
tree, the training dataset, the target attribute and the feature list. This
module turns the forms a caller may hold (a `DecisionTreeSnapshot`, a plain
mapping decoded from JSON, or the JSON text itself) back into a validated
`DecisionTreeSnapshot`.

Validation is eager: a structurally invalid snapshot is rejected here with
`MalformedSnapshotError` rather than failing later during prediction.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from id3kit.decision_tree.models import DecisionTreeSnapshot
from id3kit.exceptions import ArgumentError, MalformedSnapshotError

__all__ = ["LOAD_FORMS", "coerce_snapshot", "read_snapshot", "write_snapshot"]

LOAD_FORMS: Final[tuple[str, ...]] = (
    "load(snapshot: DecisionTreeSnapshot)",
    "load(snapshot: Mapping[str, Any]) with keys tree, dataset, target, features",
    "load(snapshot: str | bytes) holding the JSON form of a snapshot",
)


def coerce_snapshot(snapshot: object) -> DecisionTreeSnapshot:
    """Convert any supported snapshot form into a validated `DecisionTreeSnapshot`.

    Args:
        snapshot (object): A `DecisionTreeSnapshot`, a mapping with the
            snapshot fields, or JSON text (str or bytes) of a snapshot.

    Returns:
        DecisionTreeSnapshot: The validated snapshot. A snapshot instance is
            deep-copied so the caller keeps no reference into the result.

    Raises:
        ArgumentError: If `snapshot` is not one of the supported forms.
        MalformedSnapshotError: If the content fails structural validation.

    Examples:
        >>> data = {
        ...     "tree": {"node_type": "result", "value": "Yes", "label": "Yes", "sample_size": 1, "confidence": 1.0},
        ...     "dataset": [{"play": "Yes"}],
        ...     "target": "play",
        ...     "features": [],
        ... }
        >>> coerce_snapshot(data).target
        'play'
    """
    if isinstance(snapshot, DecisionTreeSnapshot):
        return snapshot.model_copy(deep=True)
    try:
        if isinstance(snapshot, (str, bytes)):
            return DecisionTreeSnapshot.model_validate_json(snapshot)
        if isinstance(snapshot, Mapping):
            return DecisionTreeSnapshot.model_validate(dict(snapshot))
    except ValidationError as exc:
        errors = _format_validation_errors(exc)
        raise MalformedSnapshotError(f"Snapshot failed validation with {len(errors)} error(s)", errors) from exc
    raise ArgumentError(f"Cannot load a snapshot from {type(snapshot).__name__}", LOAD_FORMS)


def write_snapshot(snapshot: DecisionTreeSnapshot, path: str | Path, *, indent: int | None = 2) -> Path:
    """Write a snapshot to disk as UTF-8 JSON.

    Args:
        snapshot (DecisionTreeSnapshot): The snapshot to persist.
        path (str | Path): Destination file; parent directories must exist.
        indent (int | None): JSON indentation, or `None` for compact output.
            Defaults to 2.

    Returns:
        Path: The path written.
    """
    destination = Path(path)
    destination.write_text(snapshot.model_dump_json(indent=indent), encoding="utf-8")
    return destination


def read_snapshot(path: str | Path) -> DecisionTreeSnapshot:
    """Read and validate a snapshot previously written by `write_snapshot`.

    Args:
        path (str | Path): Source file.

    Returns:
        DecisionTreeSnapshot: The validated snapshot.

    Raises:
        FileNotFoundError: If `path` does not exist.
        MalformedSnapshotError: If the file content is not a valid snapshot.
    """
    return coerce_snapshot(Path(path).read_text(encoding="utf-8"))


# Private helpers


def _format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten a pydantic `ValidationError` into one line per failure.

    Args:
        exc (ValidationError): The validation error to format.

    Returns:
        list[str]: Lines of the form `"<dotted.location>: <message>"`.
    """
    lines: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        lines.append(f"{location}: {error['msg']}")
    return lines
