"""Pydantic Schemas — wire contracts for socket frames and HTTP responses.

Invariants:
    - Schemas validate at system boundary (socket frames, API responses)
    - Field names follow the client wire format (camelCase), not Python style

Design Decisions:
    - Separate from models: schemas are wire contracts, models are persistence (ADR: DDD boundary)
"""
