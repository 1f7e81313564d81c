"""Lambda entry points for the WebSocket API and the expiry sweep."""
