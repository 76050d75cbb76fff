"""API Layer - FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every endpoint delegates to exactly one service call

Design Decisions:
    - Thin routes, fat services (ADR: controllers bind params and map results only)
"""
