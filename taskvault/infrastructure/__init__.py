"""Infrastructure Layer — database sessions, logging, password hashing.

Invariants:
    - Nothing here encodes business rules; core/ owns those
    - Library errors are translated into core/errors types before leaving this layer
"""
