"""
Exceptions raised by the procurement core.

The calculators themselves never raise for business signals (negative
balances, over-fulfilment); these cover malformed structure only.
"""


class ProcurementError(Exception):
    """Base class for all procurement tracker errors."""


class FlowReferenceError(ProcurementError):
    """A flow row could not be attached to the tree."""

    def __init__(self, kind: str, row_id: str, parent_id: str | None, message: str):
        super().__init__(message)
        self.kind = kind
        self.row_id = row_id
        self.parent_id = parent_id


class DanglingReferenceError(FlowReferenceError):
    """A row references a parent id that is not part of the snapshot."""


class RouteMismatchError(FlowReferenceError):
    """A row hangs off a sub-request whose route type does not admit it."""


class SnapshotError(ProcurementError):
    """A snapshot file exists but could not be read."""
