"""
MCP protocol server for the Agent Bridge system.

Exposes every action of every loaded manifest as an MCP tool, and every
manifest as a read-only resource, so MCP clients can call the same APIs
without going through the model loop.
"""
import json
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

from agent_bridge.domains.conversation import Session
from agent_bridge.domains.manifest import Manifest
from agent_bridge.domains.tools import ActionResult, ToolCall
from agent_bridge.manifests.compiler import ActionCompiler
from agent_bridge.plugins.manager import PluginManager
from agent_bridge.plugins.registry import PluginRegistry
from agent_bridge.services.executor import ActionExecutor

# Setup logger for this module
logger = logging.getLogger(__name__)

SERVER_NAME = "agent-bridge"
RESOURCE_URI_PREFIX = "agentbridge://apis/"


class ToolCallFailed(Exception):
    """Raised inside the MCP handler so the client sees ``isError``."""


class ProtocolServer:
    """Serves compiled manifests over MCP."""

    def __init__(
        self,
        manifests: Iterable[Manifest],
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
        compiler: Optional[ActionCompiler] = None,
        name: str = SERVER_NAME,
        version: Optional[str] = None,
    ):
        self.manifests: Dict[str, Manifest] = {}
        for manifest in manifests:
            self.manifests[manifest.name] = manifest
        self.credentials = credentials or {}
        self.registry = PluginRegistry()
        self.manager = PluginManager(registry=self.registry, compiler=compiler)
        self.executor = ActionExecutor(self.registry)
        self.name = name
        self.version = version
        self._loaded = False

    async def load(self) -> None:
        """Compile and register all manifests; safe to call more than once."""
        if self._loaded:
            return
        await self.manager.load_manifests(self.manifests.values(), self.credentials)
        self._loaded = True
        logger.info(
            f"Protocol server loaded {len(self.manifests)} APIs "
            f"({len(self.registry.list_all_tools())} tools)"
        )

    def list_tools(self) -> List[types.Tool]:
        """One tool per action, with full (uncompacted) parameter schemas."""
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.parameters)
            for tool in self.registry.to_llm_tools(compact=False)
        ]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> ActionResult:
        """Run one action directly, without a model."""
        await self.load()
        tool_call = ToolCall.from_tool_name(
            id=f"mcp_{uuid.uuid4().hex}", name=name, parameters=arguments or {}
        )
        session = Session(metadata={"source": "mcp"})
        tool_result = await self.executor.execute(tool_call, session)
        return tool_result.result

    def resource_uri(self, manifest_name: str) -> str:
        return f"{RESOURCE_URI_PREFIX}{manifest_name}"

    def list_resources(self) -> List[types.Resource]:
        return [
            types.Resource(
                uri=self.resource_uri(manifest.name),
                name=f"api-{manifest.name}",
                description=manifest.description or None,
                mimeType="application/json",
            )
            for manifest in self.manifests.values()
        ]

    def read_resource(self, uri: str) -> str:
        """Return the raw manifest document behind a resource URI.

        Raises:
            ValueError: If the URI does not name a loaded manifest
        """
        uri = str(uri)
        name = uri[len(RESOURCE_URI_PREFIX):] if uri.startswith(RESOURCE_URI_PREFIX) else None
        manifest = self.manifests.get(name) if name else None
        if manifest is None:
            raise ValueError(f"Unknown resource: {uri}")
        return json.dumps(manifest.to_document(), indent=2)

    def build_server(self) -> Server:
        """Wire this instance into a low-level MCP server."""
        server = Server(self.name, version=self.version)

        @server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            await self.load()
            return self.list_tools()

        @server.call_tool()
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
            result = await self.call_tool(name, arguments)
            if not result.success:
                raise ToolCallFailed(result.message)
            return [types.TextContent(type="text", text=result.message)]

        @server.list_resources()
        async def handle_list_resources() -> List[types.Resource]:
            return self.list_resources()

        @server.read_resource()
        async def handle_read_resource(uri: Any) -> List[ReadResourceContents]:
            return [ReadResourceContents(content=self.read_resource(uri), mime_type="application/json")]

        return server

    async def run_stdio(self) -> None:
        """Serve over stdin/stdout until the client disconnects."""
        await self.load()
        server = self.build_server()
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
