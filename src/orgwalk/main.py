from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Installs a global exception hook so unexpected crashes are logged and
reported on stderr with a non-zero exit code, then delegates to the CLI
controller.
"""

import logging
import os
import sys
import traceback
from typing import Any

# -----------------------------------------------------------------------------
# ENVIRONMENT INITIALIZATION
# -----------------------------------------------------------------------------

# Allow running this file directly from a source checkout
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.dirname(BASE_DIR)
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)


# -----------------------------------------------------------------------------
# GLOBAL SUPERVISOR (EXCEPTION HANDLING)
# -----------------------------------------------------------------------------

def global_exception_handler(exctype: type[BaseException], value: BaseException, tb: Any) -> None:
    """
    Log an unhandled exception and print its trace to stderr.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    stack_trace = "".join(traceback.format_exception(exctype, value, tb))

    logger = logging.getLogger("orgwalk.supervisor")
    logger.critical(f"FATAL EXCEPTION DETECTED: {value}\n{stack_trace}")

    print("\n" + "=" * 80, file=sys.stderr)
    print("CRITICAL ERROR (ORGWALK)", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    print(stack_trace, file=sys.stderr)


sys.excepthook = global_exception_handler


# -----------------------------------------------------------------------------
# EXECUTION ROUTING
# -----------------------------------------------------------------------------

def main() -> int:
    """
    Run the CLI and convert unexpected failures into exit code 1.

    Returns:
        int: Standard process exit code.
    """
    try:
        from orgwalk.interface.cli.app import main as cli_main
        return cli_main()
    except Exception as e:
        global_exception_handler(type(e), e, sys.exc_info()[2])
        return 1


if __name__ == "__main__":
    sys.exit(main())
