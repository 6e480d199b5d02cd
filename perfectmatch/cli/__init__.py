# CLI package for the Perfect Match Deduction Engine
"""
Read-only CLI interface for solving seasons locally.

Commands:
    perfectmatch solve    — List consistent pairings
    perfectmatch analyze  — Show partner possibilities
    perfectmatch odds     — Show pair probabilities
    perfectmatch check    — Score a prediction
"""
