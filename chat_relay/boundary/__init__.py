"""
Adapters for session storage and connection push.

Handles all interactions with external systems (session storage, WebSocket
management API). Provides adapters and clients for infrastructure dependencies.
"""
