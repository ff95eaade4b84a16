"""
LLM provider adapters for the Agent Bridge system.
"""
