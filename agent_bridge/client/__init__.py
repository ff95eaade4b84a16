from agent_bridge.client.agent_bridge import AgentBridge

__all__ = ["AgentBridge"]
