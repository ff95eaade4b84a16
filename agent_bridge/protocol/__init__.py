"""
MCP protocol surface for the Agent Bridge system.
"""
from agent_bridge.protocol.server import ProtocolServer

__all__ = ["ProtocolServer"]
