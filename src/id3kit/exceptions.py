"""Custom exceptions for id3kit.

All exceptions raised by the package derive from `ID3Error`, so callers can
catch that single class to handle any id3kit failure:

Argument exceptions (subclass ValueError):
- ArgumentError: Raised when an entry point receives arguments of the wrong shape.
- FeaturesNotFoundError: Raised when requested attributes are absent from every record.

Input exceptions (subclass ValueError):
- DegenerateInputError: Raised when an operation would divide by an empty input.
- MalformedSnapshotError: Raised when a persisted snapshot fails structural validation.
"""

from __future__ import annotations

from collections.abc import Sequence


class ID3Error(Exception):
    """Base exception for all id3kit errors."""


class ArgumentError(ID3Error, ValueError):
    """Raised when a public entry point is called with an unsupported argument shape.

    Attributes:
        expected_forms (list[str]): Human-readable descriptions of the accepted
            call forms, included in the message so the caller can self-correct.

    Examples:
        >>> err = ArgumentError("bad call", expected_forms=["train(dataset, target, features)"])
        >>> err.expected_forms
        ['train(dataset, target, features)']
    """

    expected_forms: list[str]

    def __init__(self, message: str, expected_forms: Sequence[str] = ()) -> None:
        """Initialize ArgumentError.

        Args:
            message (str): Description of what was wrong with the arguments.
            expected_forms (Sequence[str]): Accepted call forms. Defaults to none.
        """
        self.expected_forms = list(expected_forms)
        if self.expected_forms:
            message = f"{message}. Expected one of: {'; '.join(self.expected_forms)}"
        super().__init__(message)


class FeaturesNotFoundError(ArgumentError):
    """Raised when requested attributes do not exist in any training record.

    Attributes:
        missing_features (list[str]): Attribute names that were not found.
        available_attributes (list[str]): Attribute names present in the dataset.

    Examples:
        >>> err = FeaturesNotFoundError(
        ...     missing_features=["x", "y"],
        ...     available_attributes=["a", "b", "c"],
        ... )
        >>> err.missing_features
        ['x', 'y']
    """

    missing_features: list[str]
    available_attributes: list[str]

    def __init__(
        self,
        missing_features: list[str],
        available_attributes: list[str],
    ) -> None:
        """Initialize FeaturesNotFoundError.

        Args:
            missing_features (list[str]): Attribute names not found in the dataset.
            available_attributes (list[str]): Attribute names present in the dataset.
        """
        super().__init__(f"Attributes not found in dataset: {sorted(missing_features)}")
        self.missing_features = missing_features
        self.available_attributes = available_attributes


class DegenerateInputError(ID3Error, ValueError):
    """Raised when an input is empty and the requested quantity would be undefined.

    Training on zero records and evaluating on zero samples both fall in this
    category; raising keeps a NaN or a zero-division from leaking to the caller.
    """


class MalformedSnapshotError(ID3Error, ValueError):
    """Raised when a snapshot cannot be turned into a usable decision tree.

    The underlying pydantic `ValidationError` (or JSON decoding error) is
    chained as `__cause__`.

    Attributes:
        errors (list[str]): One formatted line per validation failure.
    """

    errors: list[str]

    def __init__(self, message: str, errors: Sequence[str] = ()) -> None:
        """Initialize MalformedSnapshotError.

        Args:
            message (str): Summary of the failure.
            errors (Sequence[str]): Individual validation failures. Defaults to none.
        """
        super().__init__(message)
        self.errors = list(errors)

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the message and error count.
        """
        return f"{self.__class__.__name__}(message={str(self)!r}, errors={len(self.errors)})"
