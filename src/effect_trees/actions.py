from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

EFFECT_COMPOSE = "EFFECT_COMPOSE"
ACTION_KEYS = frozenset({"type", "payload", "error", "meta"})

Continuation: TypeAlias = Callable[..., Any]
Steps: TypeAlias = tuple[Continuation | None, Continuation | None]


class EffectTreeError(AssertionError):
    """Base class for all errors raised while building or inspecting effect trees."""


class StructuralError(EffectTreeError):
    """Raised when a value is not an action, or not a composed effect, where one is required."""


class ShapeMismatchError(EffectTreeError):
    """Raised when an action does not match the expected one."""

    __match_args__ = ("actual", "expected")

    def __init__(self, message: str, actual: Any = None, expected: Any = None):
        super().__init__(message)
        self.actual = actual
        self.expected = expected


class TypeMismatchError(StructuralError, ShapeMismatchError):
    """Raised when a value is not a well-formed action of the expected type."""


class MissingContinuationError(EffectTreeError):
    """Raised when stepping into a branch that has no continuation."""

    __match_args__ = ("branch",)

    def __init__(self, branch: str, effect: Any):
        super().__init__(f"No {branch} continuation bound to effect: {effect!r}")
        self.branch = branch
        self.effect = effect


@dataclass(frozen=True)
class Action:
    """A flux standard action."""

    type: str
    payload: Any = None
    error: bool = False
    meta: Any = None


@dataclass(frozen=True)
class ComposedEffect(Action):
    """An action wrapping another action (or composed effect) together with its
    success and failure continuations, stored as ``meta["steps"][0]``."""

    type: str = EFFECT_COMPOSE

    def __post_init__(self) -> None:
        if self.type != EFFECT_COMPOSE:
            raise StructuralError(
                f"Composed effects must have type {EFFECT_COMPOSE!r}, got {self.type!r}."
            )


def _field(action: Any, name: str) -> Any:
    if isinstance(action, Mapping):
        return action.get(name)
    return getattr(action, name, None)


def type_of(action: Any) -> Any:
    """Return the ``type`` of an action record or instance, None if it has none."""
    return _field(action, "type")


def payload_of(action: Any) -> Any:
    return _field(action, "payload")


def is_action(value: Any) -> bool:
    """Check whether ``value`` is a well-formed flux standard action.

    Accepts :class:`Action` instances as well as plain mappings whose keys are
    all in ``type``, ``payload``, ``error`` and ``meta``. Never raises.
    """
    if isinstance(value, Action):
        return value.type is not None
    if isinstance(value, Mapping):
        return value.get("type") is not None and all(key in ACTION_KEYS for key in value)
    return False


def is_composed_effect(value: Any) -> bool:
    return is_action(value) and type_of(value) == EFFECT_COMPOSE


def get_steps(effect: Any) -> Steps | None:
    """Return the ``(success, failure)`` continuation pair of a composed effect.

    Returns None when the effect carries no steps at all, or when its steps
    are not a list or tuple of pairs. That is distinct from a pair whose
    elements are None.
    """
    meta = _field(effect, "meta")
    if not isinstance(meta, Mapping):
        return None
    steps = meta.get("steps")
    if not isinstance(steps, (list, tuple)) or not steps:
        return None
    if not isinstance(steps[0], (list, tuple)):
        return None
    pair = tuple(steps[0])
    return (pair + (None, None))[:2]  # type: ignore[return-value]


def get_step(effect: Any, index: int) -> Continuation | None:
    """Return the success (``index=0``) or failure (``index=1``) continuation."""
    if index not in (0, 1):
        raise IndexError(f"Step index must be 0 (success) or 1 (failure), got {index}.")
    steps = get_steps(effect)
    return steps[index] if steps else None


def bind(
    action: Any,
    on_success: Continuation | None = None,
    on_failure: Continuation | None = None,
) -> ComposedEffect:
    """Compose an action (or composed effect) with success and failure continuations.

    Args:
        action: The action to run first. May itself be a composed effect.
        on_success: Called with the action's result; returns the next action.
        on_failure: Called with the action's error; returns the next action.

    Returns:
        A new :class:`ComposedEffect` wrapping ``action``.

    Raises:
        StructuralError: If ``action`` is not a well-formed action.
        TypeError: If a continuation is neither None nor callable.
    """
    if not is_action(action):
        raise StructuralError(f"Can only bind actions, got {action!r}.")
    for name, continuation in (("on_success", on_success), ("on_failure", on_failure)):
        if continuation is not None and not callable(continuation):
            raise TypeError(f"{name} must be callable or None, got {continuation!r}.")
    return ComposedEffect(payload=action, meta={"steps": [(on_success, on_failure)]})


class create_action:
    """Create an action creator for a given action type.

    Args:
        action_type: The ``type`` of every action the creator builds.
        payload_creator: Optional function mapping the creator's arguments to
            the payload. Defaults to passing the first argument through.
        meta_creator: Optional function mapping the creator's arguments to
            the ``meta`` field.

    An ``Exception`` passed as payload produces an error action and skips the
    payload creator.
    """

    def __init__(
        self,
        action_type: str,
        payload_creator: Callable[..., Any] | None = None,
        meta_creator: Callable[..., Any] | None = None,
    ) -> None:
        if not isinstance(action_type, str) or not action_type:
            raise ValueError(f"Action type must be a non-empty string, got {action_type!r}.")
        self.action_type = action_type
        self._payload_creator = payload_creator
        self._meta_creator = meta_creator

    def __call__(self, *args: Any, **kwargs: Any) -> Action:
        first = args[0] if args else None
        error = isinstance(first, Exception)
        if error or self._payload_creator is None:
            payload = first
        else:
            payload = self._payload_creator(*args, **kwargs)
        meta = self._meta_creator(*args, **kwargs) if self._meta_creator else None
        return Action(self.action_type, payload=payload, error=error, meta=meta)

    def __str__(self) -> str:
        return self.action_type

    def __repr__(self) -> str:
        return f"create_action({self.action_type!r})"
