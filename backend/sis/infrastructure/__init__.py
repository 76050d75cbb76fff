"""Infrastructure Layer - database, logging, report cache and mail delivery.

Invariants:
    - Infrastructure never imports from core/ domain logic beyond the error hierarchy
    - External failures are mapped to SisError subclasses or logged, never leaked raw
"""
