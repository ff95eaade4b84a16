"""
Orchestration engine for the Agent Bridge system.

This service drives one user turn through the bounded tool-calling loop:
ask the model, run the tools it requests, feed the results back, and stop
when the model answers in plain text or the iteration cap is reached.
"""
import inspect
import json
import logging
from typing import Any, Callable, List, Optional

from agent_bridge.domains.conversation import Message
from agent_bridge.domains.tools import ActionResult, LLMTool, ToolCall
from agent_bridge.interfaces.plugins.plugins import AskUser, Plugin
from agent_bridge.interfaces.providers.llm import LLMProvider
from agent_bridge.plugins.registry import PluginRegistry
from agent_bridge.services.conversation import ConversationManager
from agent_bridge.services.executor import ActionExecutor, no_answer

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10

DEFAULT_SYSTEM_PROMPT = """You are Agent Bridge, a helpful AI assistant that can interact with various apps and services on behalf of the user.

You have access to tools provided by installed plugins. Use them when the user asks you to perform actions.

When a tool call fails or parameters are missing, ask the user for the needed information.

Be concise and helpful. When you perform an action, report the result clearly."""

TRUTHFULNESS_RULES = """## Rules
- Never claim that an action was performed, or that data was fetched, unless a tool call for it ran successfully in this conversation turn.
- If no tool was called, or a tool call failed, say so plainly instead of describing a result.
- Before calling an action marked as requiring confirmation, confirm the details with the user."""

STUCK_MESSAGE = "I got stuck in a loop. Please try again."
EMPTY_RESPONSE_MESSAGE = "I have nothing to say."


async def _notify(observer: Optional[Callable[..., Any]], *args: Any) -> None:
    if observer is None:
        return
    try:
        outcome = observer(*args)
        if inspect.isawaitable(outcome):
            await outcome
    except Exception as e:
        logger.error(f"Observer {observer!r} failed: {e}")


class OrchestrationEngine:
    """Runs the model/tool loop over a shared plugin registry."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        registry: Optional[PluginRegistry] = None,
        conversations: Optional[ConversationManager] = None,
        system_prompt: Optional[str] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        max_tools_per_turn: Optional[int] = None,
    ):
        """Initialize the engine.

        Args:
            llm_provider: Backend used for every model call
            registry: Registry holding the plugins, a new one if omitted
            conversations: Session owner, a new ConversationManager if omitted
            system_prompt: Replaces the default assistant instructions
            max_iterations: Cap on model calls per user turn
            max_tools_per_turn: Tool budget per request; None sends every tool
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.llm = llm_provider
        self.registry = registry or PluginRegistry()
        self.executor = ActionExecutor(self.registry)
        self.conversations = conversations or ConversationManager()
        self.system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self.max_iterations = max_iterations
        self.max_tools_per_turn = max_tools_per_turn

    async def register_plugin(self, plugin: Plugin) -> None:
        await self.registry.register(plugin)

    def get_plugins(self) -> List[Plugin]:
        return self.registry.get_all_plugins()

    def build_system_prompt(self) -> str:
        """Instructions plus the current plugin roster."""
        lines = []
        for plugin in self.registry.get_all_plugins():
            lines.append(f"- **{plugin.name}**: {plugin.description}")
            confirm = [a.name for a in plugin.actions if a.confirm]
            if confirm:
                lines.append(f"  (requires confirmation: {', '.join(confirm)})")
        roster = "\n".join(lines) or "No plugins installed."
        return f"{self.system_prompt}\n\n{TRUTHFULNESS_RULES}\n\n## Available Plugins\n{roster}"

    def create_session(self) -> str:
        """Allocate a session seeded with the system prompt."""
        session = self.conversations.create()
        self.conversations.add_message(
            session.id, Message(role="system", content=self.build_system_prompt())
        )
        return session.id

    def tools_for_turn(self, user_message: str) -> List[LLMTool]:
        if self.max_tools_per_turn:
            return self.registry.select_llm_tools(user_message, self.max_tools_per_turn)
        return self.registry.to_llm_tools()

    async def chat(
        self,
        session_id: str,
        user_message: str,
        ask_user: Optional[AskUser] = None,
        on_tool_call: Optional[Callable[[ToolCall], Any]] = None,
        on_tool_result: Optional[Callable[[str, ActionResult], Any]] = None,
    ) -> str:
        """Process a user message and return the assistant's reply.

        Args:
            session_id: Session from create_session
            user_message: The user's text
            ask_user: Callback actions may use to ask a clarifying question
            on_tool_call: Observer called with each requested ToolCall
            on_tool_result: Observer called with ``plugin.action`` and its result

        Returns:
            The model's final text, or a fixed message if the loop got stuck

        Raises:
            SessionNotFoundError: If the session is unknown
            ProviderError: If the model backend fails
        """
        session = self.conversations.require(session_id)
        self.conversations.add_message(session_id, Message(role="user", content=user_message))

        tools = self.tools_for_turn(user_message)
        ask = ask_user or no_answer

        for iteration in range(self.max_iterations):
            messages = self.conversations.get_messages(session_id)
            response = await self.llm.chat(messages, tools)

            if not response.has_tool_calls:
                text = response.text or EMPTY_RESPONSE_MESSAGE
                self.conversations.add_message(
                    session_id, Message(role="assistant", content=text)
                )
                return text

            tool_calls = response.tool_calls
            logger.info(
                f"Session {session_id} iteration {iteration + 1}: "
                f"{[tc.name for tc in tool_calls]}"
            )
            self.conversations.add_message(
                session_id,
                Message(
                    role="assistant",
                    content=response.text or "",
                    tool_calls=tool_calls,
                ),
            )

            for tc in tool_calls:
                await _notify(on_tool_call, tc)

            results = await self.executor.execute_all(tool_calls, session, ask)

            answered = set()
            for tc in tool_calls:
                if tc.id in answered:
                    continue
                answered.add(tc.id)
                result = results[tc.id].result
                await _notify(on_tool_result, tc.qualified_name, result)
                self.conversations.add_message(
                    session_id,
                    Message(
                        role="tool",
                        content=json.dumps(
                            result.model_dump(exclude_none=True), default=str
                        ),
                        tool_call_id=tc.id,
                    ),
                )

        logger.warning(
            f"Session {session_id} reached the iteration cap ({self.max_iterations})"
        )
        return STUCK_MESSAGE
