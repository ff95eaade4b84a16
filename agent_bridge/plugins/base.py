"""
Concrete plugin container shared by compiled manifests and code-defined plugins.
"""
from typing import Awaitable, Callable, List, Optional

from agent_bridge.interfaces.plugins.plugins import Action, Plugin

Hook = Callable[[], Awaitable[None]]


class ActionPlugin(Plugin):
    """A named, versioned, immutable set of actions."""

    def __init__(
        self,
        name: str,
        description: str,
        version: str,
        actions: List[Action],
        setup: Optional[Hook] = None,
        teardown: Optional[Hook] = None,
    ):
        self._name = name
        self._description = description
        self._version = version
        self._actions = tuple(actions)
        self._setup = setup
        self._teardown = teardown

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def version(self) -> str:
        return self._version

    @property
    def actions(self) -> List[Action]:
        return list(self._actions)

    async def setup(self) -> None:
        if self._setup is not None:
            await self._setup()

    async def teardown(self) -> None:
        if self._teardown is not None:
            await self._teardown()

    def __repr__(self) -> str:
        return f"ActionPlugin(name={self._name!r}, actions={len(self._actions)})"
