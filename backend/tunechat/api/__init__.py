"""API Layer — FastAPI routes, WebSocket endpoint, middleware, and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Routes hold no chat logic: they delegate to the gateway services
"""
