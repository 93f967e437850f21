from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of configuration
sources (defaults, persisted settings, CLI overrides), credential
pre-flight, name prompting, export execution and summary rendering.
Diagnostics and prompts use stderr; stdout is reserved for CSV rows.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional

from orgwalk.core.engine import run_export
from orgwalk.core.validator import validate_config
from orgwalk.domain.config import build_directory_config, get_default_config, load_config, save_config
from orgwalk.domain.errors import AuthError
from orgwalk.domain.export_models import EXIT_AUTH, EXIT_INTERRUPTED, EXIT_OK, EXIT_USAGE, ExportResult
from orgwalk.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from orgwalk.interface.cli import args as cli_args
from orgwalk.interface.cli.prompt import console_selector, fixed_selector, prompt_for_query

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.
        environ: Environment mapping for the credential. Defaults to os.environ.

    Returns:
        int: Process exit code.
    """
    env = os.environ if environ is None else environ

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, optional rotating file)
    log_file = None
    if args.log_file:
        log_file = get_default_log_path() if args.log_file == cli_args.DEFAULT_LOG_MARKER else args.log_file
    configure_logging(
        LoggingConfig(level="DEBUG" if args.debug else "INFO", console=True, log_file=log_file),
        force=True,
    )

    # 3. Resolve base configuration (Default vs Persistent state)
    base_conf = get_default_config() if args.use_defaults else load_config(args.config_path)

    # 4. Merge command-line overrides and validate
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.save_config:
        save_config(clean_conf, args.config_path)

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    # 5. Credential pre-flight, before any prompt or request
    try:
        build_directory_config(clean_conf, env)
    except AuthError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_AUTH

    # 6. Interactive collaborators
    if not clean_conf["query"]:
        try:
            clean_conf["query"] = prompt_for_query()
        except (EOFError, KeyboardInterrupt):
            print("ERROR: No display name provided.", file=sys.stderr)
            return EXIT_USAGE

    pick = clean_conf["pick"]
    select = fixed_selector(pick) if pick else console_selector()

    # 7. Export execution phase
    try:
        result = run_export(clean_conf, select, environ=env)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Operation interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    # 8. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2), file=sys.stderr)
    else:
        _print_human_summary(result)

    return result.exit_code

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge override values into the base configuration.

    Only keys known to the base are merged and None means "not given".
    """
    out = dict(base)
    for k, v in overrides.items():
        if k in out and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: ExportResult) -> None:
    """Render the export outcome on stderr."""
    if result.rows_written == 0 and not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    target = result.output_path or "stdout"
    print(
        f"Exported {result.rows_written} user(s) under {result.root_display_name} to {target}.",
        file=sys.stderr,
    )

    if result.partial:
        print(f"WARNING: {result.error}", file=sys.stderr)
        for failure in result.failures:
            print(f"  - {failure}", file=sys.stderr)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
