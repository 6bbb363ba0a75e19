"""TuneChat Gateway — real-time chat with an automated music assistant.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
