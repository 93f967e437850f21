from __future__ import annotations

"""
Hierarchy Walker.

Expands a root user into the full tree of direct and indirect reports.
Expansion is breadth-first; every identifier is claimed at most once in a
shared visited set so malformed (cyclic or multi-parent) directory data
cannot loop or duplicate a person. A failing expansion only prunes its own
subtree, and the partially built tree is handed back through
PartialTraversal.
"""

import logging
import threading
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Deque, Dict, List, Optional, Protocol, Sequence, Set

from orgwalk.domain.directory_models import HierarchyNode, UserRecord
from orgwalk.domain.errors import AuthError, DirectoryError, PartialTraversal, SubtreeFailure

logger = logging.getLogger(__name__)


class ReportSource(Protocol):
    def list_direct_reports(self, user_id: str) -> Sequence[UserRecord]: ...


class VisitedSet:
    """Identifiers already placed in the tree. Claiming is an atomic test-and-set."""

    def __init__(self) -> None:
        self._ids: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, user_id: str) -> bool:
        """Return True if the identifier was unclaimed and is now taken."""
        with self._lock:
            if user_id in self._ids:
                return False
            self._ids.add(user_id)
            return True

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)


class HierarchyWalker:
    """
    Builds the reporting tree beneath a root user.

    Args:
        client: Source of direct report listings.
        max_workers: Sibling subtrees are expanded concurrently when above 1.
        max_depth: Nodes at this depth are kept but not expanded.
        cancellation_event: Checked before each directory call; once set the
                            walk stops and the tree built so far is returned
                            through PartialTraversal.
    """

    def __init__(
            self,
            client: ReportSource,
            *,
            max_workers: int = 1,
            max_depth: Optional[int] = None,
            cancellation_event: Optional[threading.Event] = None,
    ) -> None:
        self._client = client
        self._max_workers = max(1, int(max_workers))
        self._max_depth = max_depth
        self._cancellation_event = cancellation_event or threading.Event()

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def build_tree(self, root: UserRecord) -> HierarchyNode:
        """
        Expand the hierarchy below root.

        Returns:
            HierarchyNode: The complete tree, root at depth 0.

        Raises:
            PartialTraversal: If any subtree failed or the walk was cancelled.
        """
        tree = HierarchyNode(user=root, depth=0)
        visited = VisitedSet()
        visited.claim(root.id)
        failures: List[SubtreeFailure] = []
        abort = threading.Event()

        def should_stop() -> bool:
            return abort.is_set() or self._cancellation_event.is_set()

        logger.info(f"Fetching reportees for {root.display_name} ({root.id})")

        try:
            if self._max_workers > 1:
                self._walk_parallel(tree, visited, failures, abort, should_stop)
            else:
                self._walk_sequential(tree, visited, failures, abort, should_stop)
        except KeyboardInterrupt:
            logger.warning("Traversal interrupted; keeping the hierarchy collected so far.")
            self._cancellation_event.set()

        cancelled = self._cancellation_event.is_set()
        logger.info(f"Traversal collected {len(visited)} user(s).")

        if failures or cancelled:
            raise PartialTraversal(tree, failures, cancelled=cancelled)
        return tree

    # -------------------------------------------------------------------------
    # EXPANSION STRATEGIES
    # -------------------------------------------------------------------------

    def _walk_sequential(
            self,
            tree: HierarchyNode,
            visited: VisitedSet,
            failures: List[SubtreeFailure],
            abort: threading.Event,
            should_stop: Callable[[], bool],
    ) -> None:
        queue: Deque[HierarchyNode] = deque([tree])

        while queue and not should_stop():
            node = queue.popleft()
            try:
                children = self._expand(node, visited, should_stop)
            except DirectoryError as e:
                self._record_failure(node, e, failures, abort)
                continue
            queue.extend(children)

    def _walk_parallel(
            self,
            tree: HierarchyNode,
            visited: VisitedSet,
            failures: List[SubtreeFailure],
            abort: threading.Event,
            should_stop: Callable[[], bool],
    ) -> None:
        with ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="HierarchyWorker"
        ) as executor:
            pending: Dict[Future, HierarchyNode] = {
                executor.submit(self._expand, tree, visited, should_stop): tree
            }
            try:
                while pending:
                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        node = pending.pop(future)
                        try:
                            children = future.result()
                        except DirectoryError as e:
                            self._record_failure(node, e, failures, abort)
                            continue

                        if should_stop():
                            continue
                        for child in children:
                            pending[executor.submit(self._expand, child, visited, should_stop)] = child
            except KeyboardInterrupt:
                self._cancellation_event.set()
                for future in pending:
                    future.cancel()
                raise

    def _expand(
            self,
            node: HierarchyNode,
            visited: VisitedSet,
            should_stop: Callable[[], bool],
    ) -> List[HierarchyNode]:
        """
        Attach the unvisited direct reports of node and return the new children.

        Only the task expanding a node mutates its children list.
        """
        if should_stop():
            return []
        if self._max_depth is not None and node.depth >= self._max_depth:
            return []

        reports = self._client.list_direct_reports(node.user.id)

        children: List[HierarchyNode] = []
        for report in reports:
            if not visited.claim(report.id):
                logger.warning(
                    f"Skipping {report.display_name} ({report.id}) under "
                    f"{node.user.display_name}: already present in the hierarchy."
                )
                continue
            children.append(node.add_child(report))

        logger.debug(f"{node.user.display_name}: {len(children)} direct report(s) at depth {node.depth + 1}")
        return children

    @staticmethod
    def _record_failure(
            node: HierarchyNode,
            error: DirectoryError,
            failures: List[SubtreeFailure],
            abort: threading.Event,
    ) -> None:
        failures.append(SubtreeFailure(user=node.user, error=error))
        if isinstance(error, AuthError):
            # Every further call would be rejected with the same credential
            logger.error(f"Credential rejected while expanding {node.user.display_name}: {error}")
            abort.set()
        else:
            logger.warning(f"Could not expand {node.user.display_name} ({node.user.id}): {error}")


def build_tree(client: ReportSource, root: UserRecord, **options: object) -> HierarchyNode:
    """Functional shortcut for HierarchyWalker(client, **options).build_tree(root)."""
    return HierarchyWalker(client, **options).build_tree(root)  # type: ignore[arg-type]
