# Perfect Match Deduction Engine

"""
Core invariant: every Solution the engine returns is consistent with
every piece of recorded evidence, and no contestant is ever paired twice
within one Solution.

The engine is a pure function of a season snapshot. Season editing,
storage and presentation live outside this package.
"""
