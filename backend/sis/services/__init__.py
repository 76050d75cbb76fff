"""Services Layer - IO orchestration around the pure core.

Invariants:
    - Services raise SisError subclasses; routes never catch them
    - Database services receive an AsyncSession; analytics services own in-memory stores

Design Decisions:
    - One service module per controller family for locality
"""
