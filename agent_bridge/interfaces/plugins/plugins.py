"""
Plugin system interfaces.

These interfaces define the contracts for the plugin system: actions that
the model can call, plugins that group them, and the ranking strategy used
to pick a bounded subset of tools per turn.
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from agent_bridge.domains.conversation import Session
from agent_bridge.domains.tools import ActionResult, LLMTool

AskUser = Callable[[str], Awaitable[str]]


async def _no_answer(question: str) -> str:
    return ""


class ActionContext(BaseModel):
    """What an executing action can see of the conversation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session: Session
    ask: AskUser = _no_answer


class Action(ABC):
    """Interface for a single invocable action."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of the action."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the description of the action."""
        pass

    @property
    def confirm(self) -> bool:
        """Whether the action mutates state and should be confirmed first."""
        return False

    @abstractmethod
    def get_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the action parameters."""
        pass

    @abstractmethod
    def validate(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Validate raw arguments and return them with defaults applied.

        Raises:
            ParameterValidationError: If the arguments do not match the schema
        """
        pass

    @abstractmethod
    async def execute(
        self, params: Dict[str, Any], context: ActionContext
    ) -> ActionResult:
        """Execute the action with validated parameters."""
        pass


class Plugin(ABC):
    """Interface for a named group of actions."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of the plugin."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the description of the plugin."""
        pass

    @property
    @abstractmethod
    def version(self) -> str:
        """Get the version of the plugin."""
        pass

    @property
    @abstractmethod
    def actions(self) -> List[Action]:
        """Get the actions of the plugin."""
        pass

    async def setup(self) -> None:
        """Hook run when the plugin is registered."""
        return None

    async def teardown(self) -> None:
        """Hook run when the plugin is unregistered."""
        return None

    def get_action(self, action_name: str) -> Optional[Action]:
        for action in self.actions:
            if action.name == action_name:
                return action
        return None


class ToolRanker(ABC):
    """Strategy that picks the most relevant tools for a user request."""

    @abstractmethod
    def rank(
        self,
        user_input: str,
        tools: List[LLMTool],
        plugin_names: List[str],
        max_tools: int,
    ) -> List[LLMTool]:
        """Return at most ``max_tools`` tools ordered by relevance."""
        pass
