"""Action routing shared by the unified tools.

Each unified tool exposes a single ``action`` parameter; an ``ActionRouter``
maps the action name onto its handler and reports the allowed actions when
the name does not resolve.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class ActionDefinition:
    """One routable action of a unified tool."""

    name: str
    handler: Callable[..., dict]
    summary: Optional[str] = None


class ActionRouterError(ValueError):
    """Raised when an action is missing or not supported by the router."""

    def __init__(self, message: str, *, allowed_actions: Iterable[str]):
        super().__init__(message)
        self.allowed_actions: List[str] = list(allowed_actions)


class ActionRouter:
    """Dispatch ``action`` names to handlers for a single tool."""

    def __init__(self, *, tool_name: str, actions: Iterable[ActionDefinition]):
        self.tool_name = tool_name
        self._actions: Dict[str, ActionDefinition] = {}
        for definition in actions:
            key = definition.name.lower()
            if key in self._actions:
                raise ValueError(
                    f"Duplicate action '{definition.name}' for tool '{tool_name}'"
                )
            self._actions[key] = definition
        if not self._actions:
            raise ValueError(f"Tool '{tool_name}' requires at least one action")

    def allowed_actions(self) -> List[str]:
        return [definition.name for definition in self._actions.values()]

    def describe(self) -> Dict[str, Optional[str]]:
        return {
            definition.name: definition.summary
            for definition in self._actions.values()
        }

    def dispatch(self, action: Optional[str] = None, **kwargs: Any) -> dict:
        if not action:
            raise ActionRouterError(
                f"Tool '{self.tool_name}' requires an action",
                allowed_actions=self.allowed_actions(),
            )
        definition = self._actions.get(action.strip().lower())
        if definition is None:
            raise ActionRouterError(
                f"Unsupported action '{action}' for tool '{self.tool_name}'",
                allowed_actions=self.allowed_actions(),
            )
        return definition.handler(**kwargs)
