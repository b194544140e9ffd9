import operator
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .actions import (
    ShapeMismatchError,
    TypeMismatchError,
    is_action,
    is_composed_effect,
    payload_of,
    type_of,
)


@dataclass(frozen=True)
class Matchers:
    """The two custom assertions effect trees need from a test framework.

    Args:
        equals: Deep equality used for every comparison. Replace it to plug in
            custom equality, e.g. approximate comparison of numeric payloads.
    """

    equals: Callable[[Any, Any], bool] = operator.eq

    def to_be_of_type(self, actual: Any, expected_type: str) -> None:
        """Assert that ``actual`` is a well-formed action of type ``expected_type``."""
        if not is_action(actual):
            raise TypeMismatchError(
                f"Expected an action of type {expected_type!r}, got {actual!r}",
                actual,
                expected_type,
            )
        if not self.equals(type_of(actual), expected_type):
            raise TypeMismatchError(
                f"Expected action of type {expected_type!r}, got type {type_of(actual)!r}",
                actual,
                expected_type,
            )

    def to_equal_action(self, actual: Any, expected: Any) -> None:
        """Assert that ``actual`` equals ``expected``.

        Composed effects carry continuations, which cannot be compared by
        value, so for an expected composed effect only the payloads are
        compared.
        """
        if not self.equals(type_of(actual), type_of(expected)):
            raise ShapeMismatchError(
                f"Expected action of type {type_of(expected)!r}, got type {type_of(actual)!r}",
                actual,
                expected,
            )
        if is_composed_effect(expected):
            if not self.equals(payload_of(actual), payload_of(expected)):
                raise ShapeMismatchError(
                    f"Expected {payload_of(actual)!r} to equal {payload_of(expected)!r}",
                    payload_of(actual),
                    payload_of(expected),
                )
        elif not self.equals(actual, expected):
            raise ShapeMismatchError(f"Expected {actual!r} to equal {expected!r}", actual, expected)


DEFAULT_MATCHERS = Matchers()
