"""
Perfect Match CLI entry point.

Usage:
    python -m perfectmatch.cli solve season.yaml
    python -m perfectmatch.cli analyze season.yaml
    python -m perfectmatch.cli odds season.yaml
    python -m perfectmatch.cli check season.yaml predictions.yaml
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
