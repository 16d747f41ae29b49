"""Pytest configuration for the linearization compiler."""

import sys
from pathlib import Path

# Add the project root to the path so absolute imports work
root_dir = Path(__file__).parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))
