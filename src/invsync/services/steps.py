"""Error context for reconciliation steps."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger

from invsync.errors import InvSyncError, ReconciliationError


@contextmanager
def step(action: str, kind: str, identifier: object) -> Iterator[None]:
    """
    Attach step context to any invsync error raised inside the block.

    The first failure aborts the pass; it is re-raised as a
    ReconciliationError naming the action, entity kind and identifier,
    with the original error chained.
    """
    try:
        yield
    except ReconciliationError:
        raise
    except InvSyncError as e:
        logger.error("Could not {} {} {!r}: {}", action, kind, identifier, e)
        raise ReconciliationError(
            f"Could not {action} {kind} {identifier!r}: {e}",
            action=action,
            kind=kind,
            identifier=identifier,
        ) from e
