"""Route Modules — one file per resource.

Invariants:
    - Each module defines its own APIRouter with an /api/v1 prefix and tags
    - Routes build a service with (db, caller) and wrap its result in the envelope
"""
