"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
    - Everything here is importable without a database driver installed
"""
