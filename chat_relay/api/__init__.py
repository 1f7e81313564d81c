"""
Local HTTP/WebSocket API.

FastAPI stand-in for API Gateway: drives the same orchestrator as the
Lambda handler over a plain WebSocket endpoint.
"""
