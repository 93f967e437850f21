from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Verifies the application's external behavior by invoking the entry point
script via subprocess. These tests validate argument parsing, exit codes
and the stdout/stderr split without contacting a directory service.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
ENTRY_POINT = SRC_DIR / "orgwalk" / "main.py"


def run_cli(
        args: List[str],
        extra_env: Optional[Dict[str, str]] = None,
        stdin: str = "",
        home: Optional[Path] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Helper to execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH and strips any real
    credential from the environment.

    Args:
        args: List of command line arguments (excluding 'python' and script path).
        extra_env: Variables added to the child environment.
        stdin: Text fed to the process.
        home: Home directory override so no real settings are read.

    Returns:
        subprocess.CompletedProcess: The result object containing returncode, stdout, and stderr.
    """
    env = os.environ.copy()
    env.pop("ACCESS_TOKEN", None)
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")
    if home is not None:
        env["HOME"] = str(home)
        env["USERPROFILE"] = str(home)
        env["LOCALAPPDATA"] = str(home)
    env.update(extra_env or {})

    cmd = [sys.executable, str(ENTRY_POINT)] + args

    return subprocess.run(
        cmd,
        env=env,
        input=stdin,
        capture_output=True,
        text=True,
        encoding="utf-8",
    )


def test_cli_missing_token_exits_with_auth_code(tmp_path: Path) -> None:
    """TC-01: No credential gives exit code 2 and an empty stdout."""
    result = run_cli(["-n", "Alice", "--use-defaults"], home=tmp_path)

    assert result.returncode == 2
    assert "ACCESS_TOKEN environment variable is not set" in result.stderr
    assert result.stdout == ""


def test_cli_custom_token_variable_is_named(tmp_path: Path) -> None:
    result = run_cli(["-n", "Alice", "--use-defaults", "--token-env", "GRAPH_TOKEN"], home=tmp_path)

    assert result.returncode == 2
    assert "GRAPH_TOKEN environment variable is not set" in result.stderr


def test_cli_dump_config(tmp_path: Path) -> None:
    """TC-02: The effective configuration is printed as JSON on stdout."""
    result = run_cli(["--use-defaults", "--dump-config", "--workers", "8", "--max-depth", "2"], home=tmp_path)

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert data["max_workers"] == 8
    assert data["max_depth"] == 2
    assert data["token_env"] == "ACCESS_TOKEN"


def test_cli_prompt_without_input_is_usage_error(tmp_path: Path) -> None:
    result = run_cli(["--use-defaults"], extra_env={"ACCESS_TOKEN": "dummy"}, home=tmp_path)

    assert result.returncode == 2
    assert "Enter the display name to search" in result.stderr
    assert result.stdout == ""


def test_cli_invalid_argument_type() -> None:
    result = run_cli(["--workers", "lots"])

    assert result.returncode == 2
    assert "invalid int value" in result.stderr


def test_cli_help_message() -> None:
    """TC-03: Verify help message is displayed (smoke test for argparse)."""
    result = run_cli(["--help"])

    assert result.returncode == 0
    assert "usage: orgwalk" in result.stdout
    assert "--name" in result.stdout
