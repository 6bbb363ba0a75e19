"""Infrastructure Layer — database access, collaborator implementations, logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All SQLAlchemy failures mapped to PersistenceError / SearchError
"""
