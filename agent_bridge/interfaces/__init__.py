"""
Abstract interfaces for the Agent Bridge system.

These interfaces define the contracts between plugins, providers and
repositories so that each can be replaced independently.
"""
