import inspect
from collections.abc import Callable
from typing import Any

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def positional_capacity(func: Callable[..., Any]) -> int | None:
    """Return how many positional arguments ``func`` accepts, None if unbounded
    or if its signature cannot be inspected."""
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return None
    count = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in _POSITIONAL:
            count += 1
    return count


def call_continuation(func: Callable[..., Any], *args: Any) -> Any:
    """Call a continuation, dropping trailing arguments it does not accept.

    Continuations are written like ``lambda: clean()`` as often as
    ``lambda response: failure(response)``, and callers pass a result value
    to both.
    """
    capacity = positional_capacity(func)
    if capacity is not None and capacity < len(args):
        args = args[:capacity]
    return func(*args)
