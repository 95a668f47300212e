"""
CLI command entry points for template_eval.

These functions are registered as console scripts in pyproject.toml.
Each function delegates to the corresponding script in scripts/.
"""

import subprocess
import sys
from pathlib import Path


def _run_script(script_name: str) -> int:
    """
    Helper to run a script with arguments.

    Args:
        script_name: Name of script file (without .py extension)

    Returns:
        The script's exit status
    """
    script = Path(__file__).parent.parent.parent / "scripts" / f"{script_name}.py"
    # Safe: sys.argv[1:] passed as list (not shell=True), arguments validated by argparse
    completed = subprocess.run([sys.executable, str(script)] + sys.argv[1:], check=False)
    return completed.returncode


def run_gauntlet():
    """Entry point for run-gauntlet command."""
    sys.exit(_run_script("run_gauntlet"))


def run_align_clusters():
    """Entry point for align-clusters command."""
    sys.exit(_run_script("align_clusters"))
