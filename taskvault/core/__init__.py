"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - All functions are pure and deterministic ("now" is always passed in)

Design Decisions:
    - Functional core separated from imperative shell: services/ fetches rows,
      hands plain values to core/, and persists whatever core/ accepts
"""
