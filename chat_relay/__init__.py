"""
Multi-tenant chat relay.

Bridges WebSocket connections to a generative completion API with
per-tenant prompt context and short-lived DynamoDB conversation state.
"""

__version__ = "0.1.0"
