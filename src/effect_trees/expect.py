from collections.abc import Callable
from typing import Any

from ._calling import call_continuation
from .actions import (
    EFFECT_COMPOSE,
    MissingContinuationError,
    get_step,
    is_composed_effect,
    payload_of,
)
from .matchers import DEFAULT_MATCHERS, Matchers
from .trees import DEFAULT_CALLBACK_VALUE, log_effect, unbind_effect_payload

_BRANCHES = {0: "success", 1: "failure"}
_UNSET: Any = object()


class EffectExpectation:
    """Fluent assertions on a single composed effect.

    Created by :func:`expect_effect`; every assertion method returns the
    expectation itself so checks can be chained before stepping into a branch
    with :meth:`to_success` or :meth:`to_failure`.
    """

    def __init__(self, effect: Any, matchers: Matchers, placeholder: Any):
        self._effect = effect
        self._matchers = matchers
        self._placeholder = placeholder

    @property
    def effect(self) -> Any:
        return self._effect

    @property
    def action(self) -> Any:
        """The action wrapped by the effect."""
        return payload_of(self._effect)

    def with_action(self, fn: Callable[[Any], Any]) -> "EffectExpectation":
        """Run ``fn`` with the effect's action to allow for more thorough checks."""
        fn(self.action)
        return self

    def to_equal(self, expected: Any) -> "EffectExpectation":
        """Check that the effect's action equals ``expected``.

        If ``expected`` is a composed effect only the payloads are compared;
        consider :func:`expect_effect_with_bind` in that case.
        """
        return self.with_action(lambda action: self._matchers.to_equal_action(action, expected))

    def to_be_of_type(self, expected_type: str) -> "EffectExpectation":
        return self.with_action(lambda action: self._matchers.to_be_of_type(action, expected_type))

    def to_success(self, value: Any = _UNSET) -> Any:
        """Call the effect's success continuation with ``value`` and return its result."""
        return self._step(0, value)

    def to_failure(self, value: Any = _UNSET) -> Any:
        """Call the effect's failure continuation with ``value`` and return its result."""
        return self._step(1, value)

    def log(self, callback_value: Any = DEFAULT_CALLBACK_VALUE, **kwargs: Any) -> str:
        return log_effect(self._effect, callback_value, **kwargs)

    def _step(self, index: int, value: Any) -> Any:
        continuation = get_step(self._effect, index)
        if continuation is None:
            raise MissingContinuationError(_BRANCHES[index], self._effect)
        if value is _UNSET:
            value = self._placeholder
        return call_continuation(continuation, value)

    def __repr__(self) -> str:
        return f"EffectExpectation({self._effect!r})"


def expect_effect(
    effect: Any,
    *,
    matchers: Matchers | None = None,
    placeholder: Any = DEFAULT_CALLBACK_VALUE,
) -> EffectExpectation:
    """Start a chain of expectations on a composed effect created by ``bind``.

    Args:
        effect: The composed effect to expect on.
        matchers: Assertions to use. Defaults to :data:`DEFAULT_MATCHERS`.
        placeholder: Value passed to a continuation when ``to_success`` or
            ``to_failure`` is called without one. Continuations that take no
            argument are called without it.

    Raises:
        TypeMismatchError: If ``effect`` is not a composed effect.
    """
    matchers = matchers or DEFAULT_MATCHERS
    matchers.to_be_of_type(effect, EFFECT_COMPOSE)
    return EffectExpectation(effect, matchers, placeholder)


def expect_effect_with_bind(effect: Any, **kwargs: Any) -> EffectExpectation:
    """Like :func:`expect_effect`, but flattens the effect with
    :func:`unbind_effect_payload` first.

    Use it when the effect's payload is a composed effect itself, which would
    otherwise need to be tested within ``with_action``, typically leading to
    deeply nested tests.
    """
    if not is_composed_effect(effect):
        return expect_effect(effect, **kwargs)
    return expect_effect(unbind_effect_payload(effect), **kwargs)
