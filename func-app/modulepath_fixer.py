"""
Puts the repository root on the module search path so the Pulumi program
can import `modules` and `utils` without the project being installed.

CI installs the project (`pip install -e .`) and sets `CI=true`, in which
case nothing is changed.
"""

from pathlib import Path
import sys
import os

if os.environ.get("CI") != "true":
    repo_root = str(Path(__file__).resolve().parents[1])
    if repo_root not in sys.path:
        sys.path.append(repo_root)
