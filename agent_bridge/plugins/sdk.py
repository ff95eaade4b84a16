"""
Helpers for writing plugins in Python.

This module provides FunctionAction, a base action backed by a pydantic
parameter model and an async function, define_plugin to bundle actions
into a plugin, and PluginTester to exercise a plugin without a model.
"""
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from agent_bridge.domains.conversation import Session
from agent_bridge.domains.tools import ActionResult
from agent_bridge.errors import ParameterValidationError
from agent_bridge.interfaces.plugins.plugins import Action, ActionContext, Plugin
from agent_bridge.manifests.schema import format_validation_errors
from agent_bridge.plugins.base import ActionPlugin, Hook

ActionFunction = Callable[[Dict[str, Any], ActionContext], Awaitable[ActionResult]]


class FunctionAction(Action):
    """Action whose arguments are described by a pydantic model."""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: Type[BaseModel],
        execute: Optional[ActionFunction] = None,
        confirm: bool = False,
    ):
        self._name = name
        self._description = description
        self._parameters = parameters
        self._execute = execute
        self._confirm = confirm

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def confirm(self) -> bool:
        return self._confirm

    def get_schema(self) -> Dict[str, Any]:
        """Return the JSON schema for this action's parameters."""
        return self._parameters.model_json_schema()

    def validate(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            validated = self._parameters.model_validate(params or {})
        except ValidationError as e:
            raise ParameterValidationError(format_validation_errors(e)) from e
        return validated.model_dump()

    async def execute(self, params: Dict[str, Any], context: ActionContext) -> ActionResult:
        """Execute the action; subclasses may override instead of passing ``execute``."""
        if self._execute is None:
            raise NotImplementedError("Action must implement execute method")
        return await self._execute(params, context)


def define_plugin(
    name: str,
    description: str,
    version: str,
    actions: List[Action],
    setup: Optional[Hook] = None,
    teardown: Optional[Hook] = None,
) -> ActionPlugin:
    """Bundle hand-written actions into a plugin.

    Example:
        class Echo(BaseModel):
            text: str

        async def echo(params, context):
            return ActionResult(success=True, message=params["text"])

        plugin = define_plugin(
            name="echo",
            description="Repeats things",
            version="1.0.0",
            actions=[FunctionAction("say", "Repeat text", Echo, echo)],
        )
    """
    return ActionPlugin(
        name=name,
        description=description,
        version=version,
        actions=actions,
        setup=setup,
        teardown=teardown,
    )


class PluginTester:
    """Test harness for running a plugin's actions without a model."""

    def __init__(self, plugin: Plugin):
        self.plugin = plugin

    async def setup(self) -> None:
        await self.plugin.setup()

    async def teardown(self) -> None:
        await self.plugin.teardown()

    async def execute_action(
        self,
        action_name: str,
        params: Dict[str, Any],
        ask_responses: Optional[Dict[str, str]] = None,
    ) -> ActionResult:
        """Validate ``params`` and run one action.

        Raises:
            KeyError: If the plugin has no such action
            ParameterValidationError: If the parameters are invalid
        """
        action = self.plugin.get_action(action_name)
        if action is None:
            raise KeyError(
                f'Action "{action_name}" not found in plugin "{self.plugin.name}"'
            )

        validated = action.validate(params)
        answers = ask_responses or {}

        async def ask(question: str) -> str:
            return answers.get(question, "")

        context = ActionContext(session=Session(id=str(uuid.uuid4())), ask=ask)
        return await action.execute(validated, context)

    def get_action_names(self) -> List[str]:
        return [action.name for action in self.plugin.actions]
