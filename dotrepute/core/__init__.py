"""
Core utilities: shared exception types and cross-cutting concerns used by
the scoring engine, history stores and configuration layer.
"""
