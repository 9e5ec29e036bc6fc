"""invsync error types.

All custom exceptions inherit from InvSyncError to allow
catching any invsync-specific error.
"""


class InvSyncError(Exception):
    """Base exception for all invsync errors."""

    pass


class ConfigurationError(InvSyncError):
    """Invalid configuration."""

    pass


class GatewayError(InvSyncError):
    """Controller API call failed (transport failure or non-success status)."""

    def __init__(
        self,
        message: str,
        method: str,
        url: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body


class VariablesError(InvSyncError):
    """Variables payload could not be encoded or decoded."""

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class ResolutionError(InvSyncError):
    """Group name resolution failed."""

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name


class GroupNotFoundError(ResolutionError):
    """No materialized group carries the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unable to retrieve ID for group named {name!r}", name)


class AmbiguousGroupNameError(ResolutionError):
    """More than one group carries the requested name."""

    def __init__(self, name: str, ids: list[int | None]) -> None:
        super().__init__(f"Group name {name!r} matches {len(ids)} groups: {ids}", name)
        self.ids = ids


class ReconciliationError(InvSyncError):
    """A reconciliation step failed.

    Carries the attempted action, the entity kind and its identifier
    (id or name). The underlying error is chained as ``__cause__``.
    """

    def __init__(self, message: str, action: str, kind: str, identifier: object) -> None:
        super().__init__(message)
        self.action = action
        self.kind = kind
        self.identifier = identifier
