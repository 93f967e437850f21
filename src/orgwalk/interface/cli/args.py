from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the validator.
"""

import argparse
from typing import Any, Dict

from orgwalk.domain.config import DEFAULT_TOKEN_ENV

# Marker for a bare --log-file flag (use the default location)
DEFAULT_LOG_MARKER = "__default__"

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the orgwalk CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="orgwalk",
        description=(
            "Resolve a user in the directory by display name and export their "
            "whole reporting hierarchy as CSV."
        ),
    )

    # --- Target Selection ---
    p.add_argument(
        "-n", "--name",
        dest="query",
        default=None,
        help="Display name fragment to search for. Prompted when omitted.",
    )
    p.add_argument(
        "--pick",
        type=int,
        default=None,
        help="1-based candidate index to use when several users match.",
    )

    # --- Output ---
    p.add_argument(
        "-o", "--output",
        dest="output_path",
        default=None,
        help="CSV destination file. Defaults to standard output ('-').",
    )

    # --- Traversal ---
    p.add_argument(
        "--workers",
        dest="max_workers",
        type=int,
        default=None,
        help="Expand sibling subtrees concurrently with this many workers.",
    )
    p.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Do not expand reports below this depth (root is 0).",
    )

    # --- Backend ---
    p.add_argument("--base-url", default=None, help="Directory REST root URL.")
    p.add_argument(
        "--token-env",
        default=None,
        help=f"Environment variable holding the bearer token (default: {DEFAULT_TOKEN_ENV}).",
    )
    p.add_argument("--page-size", type=int, default=None, help="Records requested per page.")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
    p.add_argument("--max-retries", type=int, default=None, help="Retry budget for transient failures.")

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Settings file to load instead of the one in the user data directory.",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore persisted settings.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective backend settings for later runs.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--log-file",
        nargs="?",
        const=DEFAULT_LOG_MARKER,
        default=None,
        help="Also write diagnostics to a rotating file (default location if no path).",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the run summary as JSON on stderr.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Unset options map to None and are skipped by the merge step.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    return {
        "query": args.query,
        "pick": args.pick,
        "output_path": args.output_path,
        "max_workers": args.max_workers,
        "max_depth": args.max_depth,
        "base_url": args.base_url,
        "token_env": args.token_env,
        "page_size": args.page_size,
        "timeout": args.timeout,
        "max_retries": args.max_retries,
    }
