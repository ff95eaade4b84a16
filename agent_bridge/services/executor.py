"""
Action executor.

Resolves tool calls to registered actions, validates their arguments and
runs them. Every failure is reported as a failed ToolResult so the model
can see it and recover; nothing raised by an action escapes.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from agent_bridge.domains.conversation import Session
from agent_bridge.domains.tools import ActionResult, ToolCall, ToolResult
from agent_bridge.errors import ParameterValidationError
from agent_bridge.interfaces.plugins.plugins import ActionContext, AskUser
from agent_bridge.plugins.registry import PluginRegistry

# Setup logger for this module
logger = logging.getLogger(__name__)


async def no_answer(question: str) -> str:
    """Default ``ask`` callback for callers that cannot ask the user."""
    return ""


class ActionExecutor:
    """Runs tool calls against a PluginRegistry."""

    def __init__(self, registry: PluginRegistry):
        self.registry = registry

    async def execute(
        self,
        tool_call: ToolCall,
        session: Session,
        ask_user: Optional[AskUser] = None,
    ) -> ToolResult:
        """Execute one tool call.

        Returns:
            A ToolResult; unknown actions, invalid parameters and exceptions
            all become failed results
        """
        action = self.registry.get_action(tool_call.plugin_name, tool_call.action_name)
        if action is None:
            logger.warning(f"Model requested unknown tool {tool_call.name}")
            return ToolResult(
                tool_call_id=tool_call.id,
                result=ActionResult.failure(f"Unknown action: {tool_call.qualified_name}"),
            )

        try:
            params = action.validate(tool_call.parameters)
        except ParameterValidationError as e:
            return ToolResult(
                tool_call_id=tool_call.id,
                result=ActionResult.failure(f"Invalid parameters: {e}"),
            )

        context = ActionContext(session=session, ask=ask_user or no_answer)
        try:
            result = await action.execute(params, context)
        except Exception as e:
            logger.exception(f"Action {tool_call.qualified_name} raised: {e}")
            result = ActionResult.failure(f"Action failed: {e}")

        logger.debug(
            f"Executed {tool_call.qualified_name} (success={result.success})"
        )
        return ToolResult(tool_call_id=tool_call.id, result=result)

    async def execute_all(
        self,
        tool_calls: List[ToolCall],
        session: Session,
        ask_user: Optional[AskUser] = None,
    ) -> Dict[str, ToolResult]:
        """Execute one turn's tool calls concurrently.

        Only the first call for each id runs; later calls reusing the id
        are skipped.

        Returns:
            Results keyed by tool call id
        """
        unique: Dict[str, ToolCall] = {}
        for tc in tool_calls:
            if tc.id in unique:
                logger.warning(
                    f"Skipping {tc.qualified_name}: duplicate tool call id {tc.id}"
                )
                continue
            unique[tc.id] = tc

        results = await asyncio.gather(
            *(self.execute(tc, session, ask_user) for tc in unique.values())
        )
        return {result.tool_call_id: result for result in results}
