"""Flattening, evaluation and rendering of composed-effect trees."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias

from ._calling import call_continuation
from .actions import (
    EFFECT_COMPOSE,
    Continuation,
    StructuralError,
    bind,
    get_steps,
    is_action,
    is_composed_effect,
    payload_of,
    type_of,
)

log = logging.getLogger(__name__)

#: Value passed to every continuation while traversing a tree.
DEFAULT_CALLBACK_VALUE: MappingProxyType[str, Any] = MappingProxyType(
    {"value": MappingProxyType({})}
)

PLACEHOLDER = "?"
SUCCESS_MARK = "✔"
FAILURE_MARK = "✘"


def _require_composed_effect(effect: Any) -> None:
    if not is_composed_effect(effect):
        raise StructuralError(
            f"expected an effect-compose action ({EFFECT_COMPOSE!r}), got {effect!r}"
        )


def _bind_to_outer_steps(
    inner: Continuation | None,
    outer_success: Continuation | None,
    outer_failure: Continuation | None,
) -> Continuation | None:
    if inner is None:
        if outer_success is None:
            return None

        def _skip_to_outer(*_: Any) -> Any:
            return call_continuation(outer_success, None)

        return _skip_to_outer

    def _rebind(*args: Any) -> Any:
        value = call_continuation(inner, *args)
        if value:
            return bind(value, outer_success, outer_failure)
        if outer_success is None:
            return None
        return call_continuation(outer_success, None)

    return _rebind


def unbind_effect_payload(effect: Any) -> Any:
    """Convert a composed effect whose payload is a composed effect into one
    whose payload is a plain action.

    Effects with a plain payload are returned as is. Otherwise the following
    rewrite is repeated until the payload is no effect anymore, moving all
    bindings into the upper-most success and failure continuations::

        bind(bind(X, XS, XF), YS, YF)  ==>  bind(X, bind(XS, YS, YF), bind(XF, YS, YF))

    Args:
        effect: The composed effect to flatten. It is never mutated.

    Returns:
        A composed effect whose payload is not a composed effect.

    Raises:
        StructuralError: If ``effect`` is not a composed effect.
    """
    _require_composed_effect(effect)

    inner = payload_of(effect)
    if not is_composed_effect(inner):
        return effect

    inner_success, inner_failure = get_steps(inner) or (None, None)
    outer_success, outer_failure = get_steps(effect) or (None, None)
    log.debug("Flattening nested %s payload of %s", type_of(payload_of(inner)), EFFECT_COMPOSE)

    return unbind_effect_payload(
        bind(
            payload_of(inner),
            _bind_to_outer_steps(inner_success, outer_success, outer_failure),
            _bind_to_outer_steps(inner_failure, outer_success, outer_failure),
        )
    )


@dataclass(frozen=True)
class ActionTree:
    """Materialized view of a composed effect: the type names of its action and
    of the actions its continuations produce."""

    action: "ActionTreeNode"
    success: "ActionTreeNode" = None
    failure: "ActionTreeNode" = None

    def to_dict(self) -> dict[str, Any]:
        """Return the tree as nested dicts, omitting absent branches."""
        result: dict[str, Any] = {"action": _node_to_plain(self.action)}
        if self.success is not None:
            result["success"] = _node_to_plain(self.success)
        if self.failure is not None:
            result["failure"] = _node_to_plain(self.failure)
        return result


ActionTreeNode: TypeAlias = ActionTree | str | None


def _node_to_plain(node: ActionTreeNode) -> Any:
    if isinstance(node, ActionTree):
        return node.to_dict()
    return node


def effect_to_action_tree(
    effect: Any, callback_value: Any = DEFAULT_CALLBACK_VALUE
) -> ActionTreeNode:
    """Convert an effect to a tree of action types by applying all continuations
    along the way to ``callback_value``.

    Plain actions map to their type, anything that is not an action to None.
    """
    if is_composed_effect(effect):
        success, failure = get_steps(effect) or (None, None)
        return ActionTree(
            action=effect_to_action_tree(payload_of(effect), callback_value),
            success=_evaluate_branch(success, callback_value),
            failure=_evaluate_branch(failure, callback_value),
        )
    if is_action(effect):
        return type_of(effect)
    return None


def _evaluate_branch(continuation: Continuation | None, callback_value: Any) -> ActionTreeNode:
    if continuation is None:
        return None
    return effect_to_action_tree(call_continuation(continuation, callback_value), callback_value)


def format_action_tree(tree: ActionTreeNode, offset: int = 0, *, indent: int = 5) -> str:
    """Render an action tree as an indented ``bind(...)`` diagram."""
    if isinstance(tree, str):
        return tree
    if tree is None:
        return PLACEHOLDER

    prefix = " " * offset
    next_offset = offset + indent
    action = format_action_tree(tree.action, next_offset, indent=indent)
    success = format_action_tree(tree.success, next_offset, indent=indent)
    lines = f"bind({action},\n{prefix}   {SUCCESS_MARK} {success}"
    if tree.failure is not None:
        failure = format_action_tree(tree.failure, next_offset, indent=indent)
        lines += f",\n{prefix}   {FAILURE_MARK} {failure}"
    return f"{lines}\n{prefix})"


def _log_sink(text: str) -> None:
    log.info("%s", text)


def log_effect(
    effect: Any,
    callback_value: Any = DEFAULT_CALLBACK_VALUE,
    *,
    sink: Callable[[str], None] | None = None,
) -> str:
    """Render an effect for debugging. All continuations along the way are
    called with ``callback_value``.

    Args:
        effect: The effect (or plain action) to render.
        callback_value: Value passed to every continuation.
        sink: Receives the rendered diagram. Defaults to this module's logger
            at INFO level.

    Returns:
        The rendered diagram, surrounded by blank lines.
    """
    tree = effect_to_action_tree(effect, callback_value)
    formatted = f"\n{format_action_tree(tree)}\n"
    (sink or _log_sink)(formatted)
    return formatted
