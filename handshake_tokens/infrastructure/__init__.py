"""Infrastructure Layer — database collaborator and logging setup.

Invariants:
    - Every database failure leaving this layer is a TokenStoreError (core/errors.py)
"""
