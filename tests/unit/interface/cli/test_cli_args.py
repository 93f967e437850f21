from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies the argument schema and its translation to configuration overrides.
"""

import pytest

from orgwalk.interface.cli.args import DEFAULT_LOG_MARKER, args_to_overrides, build_parser


def test_parser_defaults_are_unset():
    """TC-01: Options that are not given map to None overrides."""
    args = build_parser().parse_args([])

    overrides = args_to_overrides(args)

    assert all(value is None for value in overrides.values())
    assert args.use_defaults is False
    assert args.json_output is False
    assert args.log_file is None


def test_parser_maps_all_overrides():
    argv = [
        "-n", "Alice",
        "--pick", "2",
        "-o", "org.csv",
        "--workers", "4",
        "--max-depth", "3",
        "--base-url", "https://dir.example/v1",
        "--token-env", "GRAPH_TOKEN",
        "--page-size", "50",
        "--timeout", "2.5",
        "--max-retries", "1",
    ]

    overrides = args_to_overrides(build_parser().parse_args(argv))

    assert overrides == {
        "query": "Alice",
        "pick": 2,
        "output_path": "org.csv",
        "max_workers": 4,
        "max_depth": 3,
        "base_url": "https://dir.example/v1",
        "token_env": "GRAPH_TOKEN",
        "page_size": 50,
        "timeout": 2.5,
        "max_retries": 1,
    }


def test_parser_log_file_forms():
    parser = build_parser()

    assert parser.parse_args(["--log-file"]).log_file == DEFAULT_LOG_MARKER
    assert parser.parse_args(["--log-file", "run.log"]).log_file == "run.log"


def test_parser_rejects_non_integer_workers():
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--workers", "many"])

    assert exc_info.value.code == 2
