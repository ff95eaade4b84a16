"""
Tests for the plugin SDK helpers.
"""
import pytest
from pydantic import BaseModel, Field

from agent_bridge.domains.tools import ActionResult
from agent_bridge.errors import ParameterValidationError
from agent_bridge.plugins.sdk import FunctionAction, PluginTester, define_plugin


class GreetParams(BaseModel):
    name: str
    excited: bool = False
    times: int = Field(1, ge=1)


async def greet(params, context):
    answer = await context.ask("Formal?")
    greeting = "Good day" if answer == "yes" else "Hi"
    suffix = "!" if params["excited"] else "."
    return ActionResult(success=True, message=f"{greeting} {params['name']}{suffix}" * params["times"])


@pytest.fixture
def plugin():
    return define_plugin(
        name="greeter",
        description="Says hello",
        version="0.1.0",
        actions=[
            FunctionAction("greet", "Greet someone", GreetParams, greet),
            FunctionAction("wave", "Wave", GreetParams, confirm=True),
        ],
    )


@pytest.mark.asyncio
async def test_execute_action_with_answers(plugin):
    tester = PluginTester(plugin)
    result = await tester.execute_action(
        "greet", {"name": "Ada", "excited": True}, ask_responses={"Formal?": "yes"}
    )
    assert result.message == "Good day Ada!"


@pytest.mark.asyncio
async def test_execute_action_defaults(plugin):
    result = await PluginTester(plugin).execute_action("greet", {"name": "Ada"})
    assert result.message == "Hi Ada."


@pytest.mark.asyncio
async def test_validation_errors_propagate(plugin):
    with pytest.raises(ParameterValidationError) as exc_info:
        await PluginTester(plugin).execute_action("greet", {"times": 0})
    assert len(exc_info.value.messages) == 2


@pytest.mark.asyncio
async def test_unknown_action(plugin):
    with pytest.raises(KeyError):
        await PluginTester(plugin).execute_action("dance", {})


@pytest.mark.asyncio
async def test_action_without_function(plugin):
    with pytest.raises(NotImplementedError):
        await PluginTester(plugin).execute_action("wave", {"name": "Ada"})


def test_plugin_shape(plugin):
    tester = PluginTester(plugin)
    assert tester.get_action_names() == ["greet", "wave"]
    assert plugin.get_action("wave").confirm is True
    assert plugin.get_action("greet").get_schema()["required"] == ["name"]
