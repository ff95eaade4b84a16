"""
Manifest compilation for the Agent Bridge.

Turns declarative API manifests into executable plugins: parameter
schemas, HTTP request building, response summaries and enrichment hooks.
"""
