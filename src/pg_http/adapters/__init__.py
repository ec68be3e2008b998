"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: the FastAPI REST API
- Outbound adapters: the store directory, the engine launcher, the session
"""
