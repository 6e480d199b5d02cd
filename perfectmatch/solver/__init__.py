# Solver package for the Perfect Match Deduction Engine
"""
Constraint propagation over matching nights and truth booths.

Public entry points live in solver.engine: solve() and solve_season().
"""
