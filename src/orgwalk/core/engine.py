from __future__ import annotations

"""
Core export orchestration.

Coordinates a complete run:
1. Validates configuration and binds the environment credential.
2. Resolves the name fragment to a single root user.
3. Walks the reporting hierarchy below the root.
4. Streams the flattened rows to the output sink.

Structural failures (credential, no match) end the run before any output.
A partial traversal still writes every collected row and is reported
afterwards.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from orgwalk.core.emitter import emit_to
from orgwalk.core.resolver import IdentityResolver, SelectionCallback
from orgwalk.core.validator import validate_config
from orgwalk.core.walker import HierarchyWalker
from orgwalk.domain.config import DirectoryConfig, build_directory_config
from orgwalk.domain.directory_models import HierarchyNode
from orgwalk.domain.errors import (
    AuthError,
    DirectoryError,
    InvalidSelection,
    NotFound,
    PartialTraversal,
)
from orgwalk.domain.export_models import (
    EXIT_AUTH,
    EXIT_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_USAGE,
    ExportResult,
    create_error_result,
    create_export_result,
)
from orgwalk.infra.fs import is_stdout_target, normalize_path, open_sink
from orgwalk.infra.network.directory_client import DirectoryClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[DirectoryConfig], Any]


def run_export(
        config: Optional[Dict[str, Any]],
        select: SelectionCallback,
        *,
        environ: Optional[Mapping[str, str]] = None,
        client_factory: Optional[ClientFactory] = None,
        cancellation_event: Optional[threading.Event] = None,
) -> ExportResult:
    """
    Execute a full directory export.

    Args:
        config: The configuration dictionary (raw or partial).
        select: Selection callback used when the query is ambiguous.
        environ: Environment mapping holding the credential.
        client_factory: Builds the directory client from its settings.
        cancellation_event: Stops the walk early when set.

    Returns:
        ExportResult: Outcome, exit code and metrics.
    """
    started = time.monotonic()
    logger.info("Export execution started.")

    # -------------------------------------------------------------------------
    # 1) Config & Credential
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    try:
        dir_cfg = build_directory_config(cfg, environ)
    except AuthError as e:
        logger.error(str(e))
        return create_error_result(str(e), EXIT_AUTH)

    client = (client_factory or DirectoryClient)(dir_cfg)
    try:
        # ---------------------------------------------------------------------
        # 2) Identity Resolution
        # ---------------------------------------------------------------------
        try:
            root = IdentityResolver(client, select).resolve(cfg["query"])
        except ValueError as e:
            return create_error_result(str(e), EXIT_USAGE)
        except NotFound as e:
            logger.error(str(e))
            return create_error_result(str(e), EXIT_NOT_FOUND)
        except InvalidSelection as e:
            logger.error(str(e))
            return create_error_result(str(e), EXIT_USAGE)
        except AuthError as e:
            logger.error(f"Authentication failed: {e}")
            return create_error_result(str(e), EXIT_AUTH)
        except DirectoryError as e:
            logger.error(f"Directory search failed: {e}")
            return create_error_result(str(e), EXIT_FAILURE)

        # ---------------------------------------------------------------------
        # 3) Hierarchy Traversal
        # ---------------------------------------------------------------------
        walker = HierarchyWalker(
            client,
            max_workers=cfg["max_workers"],
            max_depth=cfg["max_depth"],
            cancellation_event=cancellation_event,
        )
        failures: List[str] = []
        cancelled = False
        try:
            tree: HierarchyNode = walker.build_tree(root)
        except PartialTraversal as partial:
            tree = partial.tree
            failures = [str(f) for f in partial.failures]
            cancelled = partial.cancelled
    finally:
        close = getattr(client, "close", None)
        if callable(close):
            close()

    # -------------------------------------------------------------------------
    # 4) Emission
    # -------------------------------------------------------------------------
    output_path = cfg["output_path"]
    resolved_output = "" if is_stdout_target(output_path) else normalize_path(output_path)
    try:
        with open_sink(output_path) as sink:
            rows_written = emit_to(tree, sink)
    except OSError as e:
        msg = f"Failed to write output to '{resolved_output or 'stdout'}': {e}"
        logger.error(msg)
        return create_error_result(msg, EXIT_FAILURE, root=root)

    if resolved_output:
        logger.info(f"Wrote {rows_written} row(s) to {resolved_output}")

    for failure in failures:
        logger.error(f"Incomplete subtree: {failure}")

    summary = {
        "elapsed_seconds": round(time.monotonic() - started, 3),
        "max_depth_reached": max(node.depth for node in tree.walk()),
        "workers": cfg["max_workers"],
    }
    return create_export_result(
        root=root,
        rows_written=rows_written,
        output_path=resolved_output,
        failures=failures,
        cancelled=cancelled,
        summary_extra=summary,
    )
