"""
Tests for keyword-based tool ranking.
"""
from agent_bridge.domains.tools import LLMTool
from agent_bridge.plugins.ranking import KeywordToolRanker, tokenize

ACTIONS = ["search", "list_items", "get_item", "create_item", "update_item", "delete_item"]
PLUGINS = ["spotify", "github", "notion", "slack", "gmail"]


def make_tool(plugin, action, description=""):
    return LLMTool(
        name=f"{plugin}__{action}",
        description=f"[{plugin}] {description or action.replace('_', ' ')}",
        parameters={"type": "object", "properties": {}},
    )


def thirty_tools():
    return [make_tool(p, a) for p in PLUGINS for a in ACTIONS]


def test_tokenize_drops_stopwords_and_adds_singulars():
    assert tokenize("Find the songs for me") == {"find", "songs", "song"}


def test_mentioned_plugin_fills_budget():
    tools = thirty_tools()
    assert len(tools) == 30
    selected = KeywordToolRanker().rank(
        "search my spotify library", tools, PLUGINS, max_tools=6
    )
    assert len(selected) == 6
    assert all(t.name.startswith("spotify__") for t in selected)


def test_backfills_after_mentioned_plugin():
    tools = thirty_tools()
    selected = KeywordToolRanker().rank("use gmail", tools, PLUGINS, max_tools=8)
    names = [t.name for t in selected]
    assert len(names) == 8
    assert all(n.startswith("gmail__") for n in names[:6])
    assert not any(n.startswith("gmail__") for n in names[6:])


def test_keyword_overlap_beats_priority():
    tools = [
        make_tool("music", "search", "Search the catalog"),
        make_tool("music", "get_playlist", "Get a playlist"),
        make_tool("docs", "delete_page", "Delete a page"),
    ]
    selected = KeywordToolRanker().rank("delete that page", tools, ["music", "docs"], 1)
    assert [t.name for t in selected] == ["docs__delete_page"]


def test_reads_rank_before_writes_without_keywords():
    tools = [
        make_tool("crm", "delete_contact"),
        make_tool("crm", "create_contact"),
        make_tool("crm", "search_contacts"),
    ]
    selected = KeywordToolRanker().rank("hello", tools, [], 2)
    assert [t.name for t in selected] == ["crm__search_contacts", "crm__create_contact"]


def test_returns_everything_when_within_budget():
    tools = thirty_tools()[:4]
    assert KeywordToolRanker().rank("anything", tools, PLUGINS, 6) == tools
    assert KeywordToolRanker().rank("anything", thirty_tools(), PLUGINS, 0) == thirty_tools()


def test_synonyms_are_pluggable():
    tools = [make_tool("shop", "list_orders"), make_tool("shop", "get_weather")]
    ranker = KeywordToolRanker(synonyms={"purchases": ("orders",)}, priorities=())
    selected = ranker.rank("my purchases", tools, [], 1)
    assert [t.name for t in selected] == ["shop__list_orders"]
