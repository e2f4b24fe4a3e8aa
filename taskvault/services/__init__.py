"""Services — imperative shell around the pure core.

Invariants:
    - One service class per resource, constructed per request with (db, caller)
    - Services own transactions: one commit per successful write
    - Core functions decide; services fetch facts, call core, persist the outcome
"""
