"""Typed failures raised by the sync pipeline."""

from __future__ import annotations


class SyncError(Exception):
    pass


class SourceUnavailable(SyncError):
    """A schema, page or record fetch against the source failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class PaginationProtocolViolation(SyncError):
    """The source broke the cursor contract (stalled cursor, ceiling exceeded)."""


class TenantNotConfigured(SyncError):
    """The tenant has no linked database for the requested logical type."""

    def __init__(self, tenant_id: str, logical_type: str):
        self.tenant_id = tenant_id
        self.logical_type = logical_type
        super().__init__(
            f"No {logical_type} database connected for this account. "
            "Connect your database and try again."
        )


class AssetMirrorFailure(SyncError):
    pass


class DeleteFailure(SyncError):
    def __init__(self, external_id: str, reason: str):
        self.external_id = external_id
        self.reason = reason
        super().__init__(f"delete failed for {external_id}: {reason}")
