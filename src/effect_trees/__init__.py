"""Inspect, flatten and render composed-effect trees.

A composed effect wraps an action together with success and failure
continuations, each producing the next action (or composed effect) from a
result value. This package lets tests walk such trees step by step without
running any of the effects.

Example:

>>> import effect_trees as et
>>>
>>> start = et.create_action("START")
>>> success = et.create_action("SUCCESS")
>>>
>>> effect = et.bind(start({"id": 1}), lambda response: success(response["value"]))
>>> result = et.expect_effect(effect).to_be_of_type("START").to_success({"value": "data"})
>>> result
Action(type='SUCCESS', payload='data', error=False, meta=None)
>>> print(et.format_action_tree(et.effect_to_action_tree(effect)))
bind(START,
   ✔ SUCCESS
)
"""

from .__version__ import __version__
from .actions import (
    EFFECT_COMPOSE,
    Action,
    ComposedEffect,
    EffectTreeError,
    MissingContinuationError,
    ShapeMismatchError,
    StructuralError,
    TypeMismatchError,
    bind,
    create_action,
    get_step,
    get_steps,
    is_action,
    is_composed_effect,
)
from .expect import EffectExpectation, expect_effect, expect_effect_with_bind
from .matchers import DEFAULT_MATCHERS, Matchers
from .trees import (
    DEFAULT_CALLBACK_VALUE,
    ActionTree,
    effect_to_action_tree,
    format_action_tree,
    log_effect,
    unbind_effect_payload,
)

__all__ = [
    "Action",
    "ActionTree",
    "ComposedEffect",
    "DEFAULT_CALLBACK_VALUE",
    "DEFAULT_MATCHERS",
    "EFFECT_COMPOSE",
    "EffectExpectation",
    "EffectTreeError",
    "Matchers",
    "MissingContinuationError",
    "ShapeMismatchError",
    "StructuralError",
    "TypeMismatchError",
    "__version__",
    "bind",
    "create_action",
    "effect_to_action_tree",
    "expect_effect",
    "expect_effect_with_bind",
    "format_action_tree",
    "get_step",
    "get_steps",
    "is_action",
    "is_composed_effect",
    "log_effect",
    "unbind_effect_payload",
]
