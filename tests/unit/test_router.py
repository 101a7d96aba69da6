"""
Unit tests for the unified tool action router.
"""

import pytest

from studysheet.tools.unified.router import (
    ActionDefinition,
    ActionRouter,
    ActionRouterError,
)


def _router():
    return ActionRouter(
        tool_name="topic",
        actions=[
            ActionDefinition(name="create", handler=lambda **kw: {"made": kw}, summary="Add"),
            ActionDefinition(name="delete", handler=lambda **kw: {"gone": True}),
        ],
    )


class TestActionRouter:
    def test_dispatches_to_handler_with_kwargs(self):
        assert _router().dispatch("create", title="Trees") == {"made": {"title": "Trees"}}

    def test_action_names_are_case_insensitive(self):
        assert _router().dispatch("  DELETE ") == {"gone": True}

    def test_allowed_actions_and_describe(self):
        router = _router()
        assert router.allowed_actions() == ["create", "delete"]
        assert router.describe() == {"create": "Add", "delete": None}

    def test_missing_action(self):
        with pytest.raises(ActionRouterError, match="requires an action") as exc_info:
            _router().dispatch(None)
        assert exc_info.value.allowed_actions == ["create", "delete"]

    def test_unknown_action(self):
        with pytest.raises(ActionRouterError, match="Unsupported action 'explode'"):
            _router().dispatch("explode")

    def test_router_error_is_value_error(self):
        with pytest.raises(ValueError):
            _router().dispatch("")

    def test_duplicate_actions_rejected(self):
        definition = ActionDefinition(name="get", handler=lambda **kw: {})
        with pytest.raises(ValueError, match="Duplicate action"):
            ActionRouter(tool_name="sheet", actions=[definition, definition])

    def test_requires_actions(self):
        with pytest.raises(ValueError, match="at least one action"):
            ActionRouter(tool_name="sheet", actions=[])
