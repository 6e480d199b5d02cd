# Ingestion package for the Perfect Match Deduction Engine
"""
Season snapshot ingestion. Canonicalizes external ids at the boundary.
"""
