"""
Repositories for the Agent Bridge system.

In-memory implementations of the session cache and manifest store.
"""
