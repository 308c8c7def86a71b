"""Filesystem deletion operator.

Executes a deletion plan entry by entry with dry-run support. Files are
unlinked and directories removed with rmdir (never recursively), so a
directory that was repopulated after planning is left untouched.
"""

import errno
import logging
from dataclasses import dataclass
from enum import Enum

from torrentprune.core.planner import DeleteKind, DeleteOperation, DeletionPlan

logger = logging.getLogger(__name__)


class ActionOutcome(str, Enum):
    """Outcome of a single delete operation.

    Attributes:
        SUCCESS: Entry was deleted.
        DRY_RUN: Entry would have been deleted (nothing was touched).
        PERMISSION_DENIED: The operating system refused the deletion.
        NOT_FOUND: Entry vanished between planning and execution.
        NOT_EMPTY: Directory was repopulated after planning.
        ERROR: Any other failure.
    """

    SUCCESS = "success"
    DRY_RUN = "dry_run"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    NOT_EMPTY = "not_empty"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of a single delete operation.

    Attributes:
        operation: The operation that was attempted.
        outcome: What happened.
        error: Error message if the operation failed, None otherwise.
    """

    operation: DeleteOperation
    outcome: ActionOutcome
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the operation succeeded (or would have, in dry-run mode)."""
        return self.outcome in (ActionOutcome.SUCCESS, ActionOutcome.DRY_RUN)

    @property
    def dry_run(self) -> bool:
        """Check if this was a dry-run result."""
        return self.outcome == ActionOutcome.DRY_RUN


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    """Outcome of every operation in an executed plan, in plan order.

    Attributes:
        results: One result per planned operation.
    """

    results: tuple[ActionResult, ...] = ()

    @property
    def succeeded(self) -> tuple[ActionResult, ...]:
        """Results of operations that deleted their entry."""
        return tuple(r for r in self.results if r.outcome == ActionOutcome.SUCCESS)

    @property
    def failed(self) -> tuple[ActionResult, ...]:
        """Results of operations that failed."""
        return tuple(r for r in self.results if not r.success)

    @property
    def has_failures(self) -> bool:
        """Check if any operation failed."""
        return any(not r.success for r in self.results)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the report.
        """
        return {
            "summary": {
                "total": len(self.results),
                "succeeded": len(self.succeeded),
                "failed": len(self.failed),
            },
            "results": [
                {
                    "path": str(r.operation.path),
                    "kind": r.operation.kind.value,
                    "outcome": r.outcome.value,
                    "error": r.error,
                }
                for r in self.results
            ],
        }


class FilesystemOperator:
    """Executes deletion plans.

    Execution is unconditional once invoked: confirmation is the caller's
    responsibility. A failed operation never stops the remaining ones.

    Attributes:
        _dry_run: If True, simulate deletions without modifying the filesystem.
    """

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize the FilesystemOperator.

        Args:
            dry_run: If True, report what would be deleted without deleting.
        """
        self._dry_run = dry_run

    def execute(self, plan: DeletionPlan) -> ExecutionReport:
        """Execute every operation of a plan in order.

        Args:
            plan: The ordered deletion plan.

        Returns:
            ExecutionReport with one result per operation.
        """
        results = [self._delete_single(operation) for operation in plan]
        return ExecutionReport(results=tuple(results))

    def _delete_single(self, operation: DeleteOperation) -> ActionResult:
        """Delete a single entry.

        Args:
            operation: The operation to perform.

        Returns:
            ActionResult describing the outcome.
        """
        target = operation.target

        if self._dry_run:
            logger.info("Dry-run: would delete %s", target)
            return ActionResult(operation=operation, outcome=ActionOutcome.DRY_RUN)

        try:
            if operation.kind == DeleteKind.FILE:
                if target.is_dir() and not target.is_symlink():
                    return self._failure(operation, ActionOutcome.ERROR, f"Expected a file: {target}")
                target.unlink()
            else:
                if target.is_symlink():
                    return self._failure(
                        operation, ActionOutcome.ERROR, f"Expected a directory, found a link: {target}"
                    )
                target.rmdir()
        except FileNotFoundError:
            return self._failure(operation, ActionOutcome.NOT_FOUND, f"Path does not exist: {target}")
        except PermissionError as e:
            return self._failure(operation, ActionOutcome.PERMISSION_DENIED, str(e))
        except OSError as e:
            if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                return self._failure(
                    operation, ActionOutcome.NOT_EMPTY, f"Directory is not empty: {target}"
                )
            return self._failure(operation, ActionOutcome.ERROR, str(e))

        logger.debug("Deleted %s", target)
        return ActionResult(operation=operation, outcome=ActionOutcome.SUCCESS)

    @staticmethod
    def _failure(operation: DeleteOperation, outcome: ActionOutcome, error: str) -> ActionResult:
        logger.warning("Failed to delete %s: %s", operation.target, error)
        return ActionResult(operation=operation, outcome=outcome, error=error)
