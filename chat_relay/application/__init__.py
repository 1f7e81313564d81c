"""Application layer: connection lifecycle and maintenance use cases."""
