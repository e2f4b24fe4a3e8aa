"""API Layer — FastAPI routes, caller resolution and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every JSON reply uses the {success, data?, error?, errors?, meta?} envelope

Design Decisions:
    - Thin routes delegate to services; no business rule lives in a route
"""
