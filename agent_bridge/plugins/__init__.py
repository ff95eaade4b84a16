"""
Plugin system for the Agent Bridge.

This package provides the plugin registry, tool ranking, schema
compaction, the plugin SDK and plugin discovery.
"""
