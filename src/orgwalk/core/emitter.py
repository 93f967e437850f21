from __future__ import annotations

"""
Row Emitter.

Flattens a hierarchy into depth-annotated rows and streams them as CSV.
Rows are produced lazily in pre-order (a manager immediately followed by
their whole subtree, siblings in directory order) and flushed to the sink
one at a time.
"""

import csv
import logging
from typing import Iterable, Iterator, TextIO

from orgwalk.domain.directory_models import ROW_FIELDS, UNKNOWN, HierarchyNode, Row

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# FLATTENING
# -----------------------------------------------------------------------------

def to_row(node: HierarchyNode) -> Row:
    user = node.user
    manager = node.parent.user if node.parent is not None else None
    return Row(
        depth=node.depth,
        display_name=user.display_name,
        id=user.id,
        mail=user.mail or UNKNOWN,
        job_title=user.job_title or UNKNOWN,
        department=user.department or UNKNOWN,
        office_location=user.office_location or UNKNOWN,
        employment_type=user.employment_type,
        location=user.location,
        manager_id=manager.id if manager else "",
        manager_display_name=manager.display_name if manager else "",
    )


def emit(tree: HierarchyNode) -> Iterator[Row]:
    """
    Lazily yield one Row per node in pre-order.

    The generator only reads the tree, so calling emit() again on the same
    tree yields an identical sequence.
    """
    for node in tree.walk():
        yield to_row(node)

# -----------------------------------------------------------------------------
# SERIALIZATION
# -----------------------------------------------------------------------------

def write_rows(rows: Iterable[Row], sink: TextIO) -> int:
    """
    Write a header and one CSV record per row, flushing after each record.

    Fields containing the delimiter, quotes or line breaks are quote-wrapped
    with embedded quotes doubled.

    Args:
        rows: Rows to serialize, typically emit(tree).
        sink: Text stream opened with newline="" when it is a file.

    Returns:
        int: Number of data rows written (header excluded).
    """
    writer = csv.writer(sink, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(ROW_FIELDS)
    sink.flush()

    count = 0
    for row in rows:
        writer.writerow([getattr(row, name) for name in ROW_FIELDS])
        sink.flush()
        count += 1

    logger.debug(f"Emitted {count} row(s).")
    return count


def emit_to(tree: HierarchyNode, sink: TextIO) -> int:
    """Stream the whole tree to sink. Returns the number of data rows."""
    return write_rows(emit(tree), sink)
