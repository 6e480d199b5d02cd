# Analysis package for the Perfect Match Deduction Engine
"""
Views derived from solved seasons: partner possibilities, pair odds and
prediction checks. Nothing here mutates its inputs.
"""
