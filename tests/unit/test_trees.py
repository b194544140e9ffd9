"""Unit tests for flattening, evaluating and rendering composed-effect trees."""

import logging

import pytest

from effect_trees.actions import (
    Action,
    StructuralError,
    bind,
    create_action,
    get_steps,
    is_composed_effect,
)
from effect_trees.trees import (
    DEFAULT_CALLBACK_VALUE,
    ActionTree,
    effect_to_action_tree,
    format_action_tree,
    log_effect,
    unbind_effect_payload,
)

start_action = create_action("START")
success_action = create_action("SUCCESS")
failure_action = create_action("FAILURE")
clean_action = create_action("CLEAN")
retry_action = create_action("RETRY")


def flat_tree(payload=None):
    return bind(
        start_action(payload),
        lambda response: success_action(response["value"]),
        lambda response: bind(failure_action(response), lambda: clean_action()),
    )


def nested_tree(payload=None):
    return bind(
        flat_tree(payload),
        lambda response: Action("DONE", response),
        lambda error: retry_action(error),
    )


def resolve(node):
    """Evaluate a branch fully, flattening every composed effect it yields."""
    tree = effect_to_action_tree(node)
    return tree.to_dict() if isinstance(tree, ActionTree) else tree


def test_unbind_returns_flat_effect_unchanged():
    """Test that flattening is the identity on already flat trees."""
    effect = flat_tree({"id": 1})
    assert unbind_effect_payload(effect) is effect


def test_unbind_requires_composed_effect():
    """Test that flattening a plain action fails loudly."""
    with pytest.raises(StructuralError, match="expected an effect-compose action"):
        unbind_effect_payload(start_action())
    with pytest.raises(StructuralError):
        unbind_effect_payload(None)


def test_unbind_does_not_mutate_input():
    """Test that flattening allocates a new tree."""
    effect = nested_tree({"id": 1})
    steps = get_steps(effect)
    flattened = unbind_effect_payload(effect)

    assert flattened is not effect
    assert is_composed_effect(effect.payload)
    assert get_steps(effect) == steps


def test_unbind_moves_payload_up():
    """Test that the flattened payload is the innermost plain action."""
    flattened = unbind_effect_payload(nested_tree({"id": 1}))
    assert flattened.payload == start_action({"id": 1})


def test_unbind_doubly_nested_reaches_plain_payload():
    """Test that a tree nested two levels deep is flattened in one call."""
    effect = bind(bind(flat_tree({"id": 3}), lambda: Action("MIDDLE")), lambda: Action("OUTER"))
    flattened = unbind_effect_payload(effect)

    assert not is_composed_effect(flattened.payload)
    assert flattened.payload == start_action({"id": 3})


def test_unbind_rebinds_continuation_results():
    """Test that inner results are re-bound against the outer continuations."""
    effect = nested_tree()
    success, failure = get_steps(unbind_effect_payload(effect))

    rebound = success({"value": "data"})
    assert is_composed_effect(rebound)
    assert rebound.payload == success_action("data")
    assert get_steps(rebound) == get_steps(effect)
    assert unbind_effect_payload(rebound) is rebound

    rebound_success, rebound_failure = get_steps(rebound)
    assert rebound_success("ok") == Action("DONE", "ok")
    assert rebound_failure("timeout") == retry_action("timeout")

    failed = failure({"statusCode": 500})
    assert is_composed_effect(failed)
    assert is_composed_effect(failed.payload)
    assert unbind_effect_payload(failed).payload == failure_action({"statusCode": 500})


def test_unbind_falls_back_to_outer_success_on_empty_result():
    """Test that an inner continuation returning nothing triggers the outer success."""
    effect = bind(
        bind(start_action(), lambda value: None),
        lambda response: Action("OUTER", response),
    )
    success, failure = get_steps(unbind_effect_payload(effect))

    assert success("anything") == Action("OUTER", None)
    assert failure("anything") == Action("OUTER", None)


def test_unbind_missing_inner_and_outer_continuations():
    """Test that branches absent on both levels stay absent."""
    effect = bind(bind(start_action(), lambda value: None))
    success, failure = get_steps(unbind_effect_payload(effect))

    assert failure is None
    assert success("anything") is None


def test_flattening_preserves_evaluation():
    """Test that flattening does not change what the branches evaluate to."""
    effect = nested_tree({"id": 1})
    callback_value = {"value": "data"}
    original = effect_to_action_tree(effect, callback_value)
    flattened = effect_to_action_tree(unbind_effect_payload(effect), callback_value)

    inner = original.action
    assert flattened.action == inner.action == "START"
    # The success branch carries the inner result re-bound against the outer steps.
    assert flattened.success.action == inner.success == "SUCCESS"
    assert flattened.success.success == original.success == "DONE"
    assert flattened.success.failure == original.failure == "RETRY"
    assert flattened.failure.action.to_dict() == inner.failure.to_dict()


def test_flattening_absent_inner_branch_with_outer_parameter():
    """Test an absent inner success falling through to an outer success taking a value."""
    effect = bind(
        bind(start_action(), None, lambda error: failure_action(error)),
        lambda response: Action("DONE", response),
    )
    assert effect_to_action_tree(effect, "value").to_dict() == {
        "action": {"action": "START", "failure": "FAILURE"},
        "success": "DONE",
    }

    flattened = unbind_effect_payload(effect)
    assert effect_to_action_tree(flattened, "value").to_dict() == {
        "action": "START",
        "success": "DONE",
        "failure": {"action": "FAILURE", "success": "DONE"},
    }
    assert get_steps(flattened)[0]("ignored") == Action("DONE", None)


def test_flattening_empty_inner_result_with_outer_parameter():
    """Test an empty inner result falling through to an outer success that takes a value."""
    effect = bind(
        bind(start_action(), lambda value: None),
        lambda response: Action("DONE", response),
    )
    assert effect_to_action_tree(effect, "value").to_dict() == {
        "action": {"action": "START"},
        "success": "DONE",
    }

    flattened = unbind_effect_payload(effect)
    assert effect_to_action_tree(flattened, "value").to_dict() == {
        "action": "START",
        "success": "DONE",
        "failure": "DONE",
    }
    assert get_steps(flattened)[0]("x") == Action("DONE", None)


def test_effect_to_action_tree():
    """Test evaluation of a flat tree with the default callback value."""
    tree = effect_to_action_tree(flat_tree())
    assert tree.to_dict() == {
        "action": "START",
        "success": "SUCCESS",
        "failure": {"action": "FAILURE", "success": "CLEAN"},
    }


def test_effect_to_action_tree_leaves():
    """Test evaluation of plain actions and non-actions."""
    assert effect_to_action_tree(start_action()) == "START"
    assert effect_to_action_tree({"type": "RAW"}) == "RAW"
    assert effect_to_action_tree(None) is None
    assert effect_to_action_tree("START") is None


def test_effect_to_action_tree_passes_callback_value_everywhere():
    """Test that every continuation at every depth receives the callback value."""
    received = []

    def record(kind):
        def continuation(value):
            received.append(value)
            return Action(kind)

        return continuation

    effect = bind(bind(start_action(), record("INNER")), record("OUTER"), record("ERROR"))
    effect_to_action_tree(effect, "sentinel")
    assert received == ["sentinel", "sentinel", "sentinel"]


def test_effect_to_action_tree_default_callback_value():
    """Test that the default callback value exposes an empty value."""
    seen = []
    effect_to_action_tree(bind(start_action(), lambda response: seen.append(response["value"])))
    assert seen == [{}]
    with pytest.raises(TypeError):
        DEFAULT_CALLBACK_VALUE["value"] = 1  # type: ignore[index]


def test_format_action_tree():
    """Test rendering of a nested action tree."""
    rendered = format_action_tree(effect_to_action_tree(flat_tree()))
    assert rendered == (
        "bind(START,\n"
        "   ✔ SUCCESS,\n"
        "   ✘ bind(FAILURE,\n"
        "        ✔ CLEAN\n"
        "     )\n"
        ")"
    )


def test_format_action_tree_placeholders():
    """Test rendering of leaves and missing branches."""
    assert format_action_tree("START") == "START"
    assert format_action_tree(None) == "?"
    assert format_action_tree(ActionTree("START")) == "bind(START,\n   ✔ ?\n)"
    assert format_action_tree(ActionTree("START"), 2, indent=2) == "bind(START,\n     ✔ ?\n  )"


def test_log_effect_is_deterministic():
    """Test that rendering the same tree twice produces identical output."""
    outputs: list[str] = []
    effect = nested_tree({"id": 1})
    first = log_effect(effect, {"value": "data"}, sink=outputs.append)
    second = log_effect(effect, {"value": "data"}, sink=outputs.append)

    assert first == second
    assert outputs == [first, second]
    assert first.startswith("\nbind(bind(START,")
    assert first.endswith(")\n")


def test_log_effect_default_sink(caplog):
    """Test that the diagram is logged at INFO level by default."""
    with caplog.at_level(logging.INFO, logger="effect_trees.trees"):
        rendered = log_effect(flat_tree())

    assert [record.getMessage() for record in caplog.records] == [rendered]
