"""
Keyword-based relevance ranking of tools.

When more tools are loaded than a provider accepts per request, the
registry asks a ToolRanker for the most relevant subset. The default
ranker scores tools by keyword overlap with the user's request plus a
small prior on the kind of action (reads before writes).
"""
import re
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from agent_bridge.domains.tools import LLMTool, parse_tool_name
from agent_bridge.errors import InvalidToolNameError
from agent_bridge.interfaces.plugins.plugins import ToolRanker

STOPWORDS: FrozenSet[str] = frozenset(
    {
        "the", "a", "an", "to", "for", "with", "and", "or", "of", "in", "on",
        "at", "is", "are", "can", "could", "would", "should", "please", "me",
        "my", "you", "your", "it", "this", "that", "any", "from", "via", "by",
    }
)

DEFAULT_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "song": ("track", "music"),
    "songs": ("tracks", "music"),
    "track": ("song", "music"),
    "music": ("track", "song"),
    "find": ("search", "lookup", "get"),
    "discover": ("search", "recommendations"),
    "play": ("playback", "start"),
    "pause": ("playback",),
    "skip": ("next", "previous"),
    "liked": ("saved", "library"),
}

# (keywords, score); first match wins
DEFAULT_PRIORITIES: Tuple[Tuple[Tuple[str, ...], int], ...] = (
    (("search", "find"), 18),
    (("list",), 12),
    (("get",), 10),
    (("create", "add", "start"), 8),
    (("update", "edit", "save"), 7),
    (("delete", "remove"), 6),
)
DEFAULT_BASE_PRIORITY = 4

ACTION_WEIGHT = 8
DESCRIPTION_WEIGHT = 3
MENTIONED_PLUGIN_BONUS = 30
NAME_MATCH_BONUS = 20

_TOKEN_PATTERN = re.compile(r"[a-z0-9_]+")


def tokenize(text: str) -> Set[str]:
    """Lowercase word tokens without stopwords, plus naive singular forms."""
    tokens: Set[str] = set()
    for token in _TOKEN_PATTERN.findall(text.lower()):
        if token in STOPWORDS:
            continue
        tokens.add(token)
        if token.endswith("s") and len(token) > 3:
            tokens.add(token[:-1])
    return tokens


class KeywordToolRanker(ToolRanker):
    """Scores tools by keyword overlap, action kind and plugin mentions."""

    def __init__(
        self,
        synonyms: Optional[Dict[str, Sequence[str]]] = None,
        priorities: Optional[Sequence[Tuple[Sequence[str], int]]] = None,
        base_priority: int = DEFAULT_BASE_PRIORITY,
    ):
        self.synonyms = dict(DEFAULT_SYNONYMS if synonyms is None else synonyms)
        self.priorities = tuple(DEFAULT_PRIORITIES if priorities is None else priorities)
        self.base_priority = base_priority

    def expand(self, tokens: Iterable[str]) -> Set[str]:
        expanded = set(tokens)
        for token in list(expanded):
            expanded.update(self.synonyms.get(token, ()))
        return expanded

    def action_priority(self, action_name: str) -> int:
        name = action_name.lower()
        for keywords, score in self.priorities:
            if any(keyword in name for keyword in keywords):
                return score
        return self.base_priority

    def score(
        self,
        tool: LLMTool,
        query_tokens: Set[str],
        raw_input: str,
        mentioned: Set[str],
    ) -> Tuple[int, str]:
        """Return ``(score, plugin_name)`` for one tool."""
        try:
            plugin_name, action_name = parse_tool_name(tool.name)
        except InvalidToolNameError:
            plugin_name, action_name = "", tool.name

        action_tokens = tokenize(action_name.replace("_", " ").replace("-", " "))
        description_tokens = tokenize(tool.description)

        score = (
            self.action_priority(action_name)
            + ACTION_WEIGHT * len(query_tokens & action_tokens)
            + DESCRIPTION_WEIGHT * len(query_tokens & description_tokens)
        )
        if plugin_name.lower() in mentioned:
            score += MENTIONED_PLUGIN_BONUS
        if len(raw_input) > 2 and raw_input in tool.name.lower():
            score += NAME_MATCH_BONUS
        return score, plugin_name

    def mentioned_plugins(
        self, user_input: str, query_tokens: Set[str], plugin_names: Iterable[str]
    ) -> Set[str]:
        lowered = user_input.lower()
        return {
            name.lower()
            for name in plugin_names
            if name.lower() in query_tokens or name.lower() in lowered
        }

    def rank(
        self,
        user_input: str,
        tools: List[LLMTool],
        plugin_names: List[str],
        max_tools: int,
    ) -> List[LLMTool]:
        if max_tools <= 0 or len(tools) <= max_tools:
            return list(tools)

        query_tokens = self.expand(tokenize(user_input))
        raw_input = user_input.lower().strip()
        mentioned = self.mentioned_plugins(user_input, query_tokens, plugin_names)

        scored = []
        for tool in tools:
            score, plugin_name = self.score(tool, query_tokens, raw_input, mentioned)
            scored.append((score, tool.name, plugin_name.lower(), tool))
        scored.sort(key=lambda item: (-item[0], item[1]))

        if not mentioned:
            return [item[3] for item in scored[:max_tools]]

        focused = [item[3] for item in scored if item[2] in mentioned][:max_tools]
        if len(focused) >= max_tools:
            return focused
        rest = [item[3] for item in scored if item[2] not in mentioned]
        return focused + rest[: max_tools - len(focused)]
