"""The dry-run boundary every backend call passes through."""

import logging
from collections.abc import Callable
from typing import TypeVar

from regtrack.errors import BackendError, ConfigurationError
from regtrack.models import DryRunScope

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OperationRunner:
    """Execute a named backend call, or skip it in dry-run mode.

    Skipped calls return None. With ``DryRunScope.MUTATIONS`` only calls
    flagged ``mutates=True`` are skipped; with ``DryRunScope.ALL`` reads are
    skipped as well.
    """

    def __init__(self, dry_run: bool = False, scope: DryRunScope = DryRunScope.ALL) -> None:
        self.dry_run = dry_run
        self.scope = scope

    def skips(self, mutates: bool) -> bool:
        if not self.dry_run:
            return False
        return mutates or self.scope == DryRunScope.ALL

    def run(self, operation: str, fn: Callable[[], T], mutates: bool = True) -> T | None:
        if self.skips(mutates):
            logger.info("[dry-run] skipped %s", operation)
            return None
        logger.debug("%s", operation)
        try:
            return fn()
        except ConfigurationError:
            raise
        except Exception as exc:
            raise BackendError(operation, exc) from exc
