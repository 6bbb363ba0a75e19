"""Services Layer — connection registry, credential verifier, message pipeline, assistant.

Invariants:
    - Components receive collaborators by injection (no ambient global state)
    - Only the ConnectionRegistry mutates the set of live connections

Design Decisions:
    - One file per component for locality
"""
