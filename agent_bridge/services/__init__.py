"""
Service implementations for the Agent Bridge system.

Conversation ownership, action execution and the orchestration loop.
"""
