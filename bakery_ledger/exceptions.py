"""
Errors raised by the ledger.

``NotFound`` and ``InvalidOperation`` are the only errors callers are
expected to handle; the HTTP layer renders them as tagged bodies such as
``{"NotFound": {"msg": "..."}}``.  ``StorageError`` marks a broken
storage contract and is never translated.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for errors returned to ledger callers."""

    kind = "LedgerError"

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg = msg

    def to_tagged(self) -> dict:
        return {self.kind: {"msg": self.msg}}


class NotFound(LedgerError):
    kind = "NotFound"


class InvalidOperation(LedgerError):
    kind = "InvalidOperation"


ERROR_KINDS = {cls.kind: cls for cls in (NotFound, InvalidOperation)}


def from_tagged(body) -> Optional[LedgerError]:
    """Rebuild a ``LedgerError`` from its tagged form, or None if ``body`` is not one."""
    if not isinstance(body, dict) or len(body) != 1:
        return None
    kind, inner = next(iter(body.items()))
    cls = ERROR_KINDS.get(kind)
    if cls is None or not isinstance(inner, dict):
        return None
    return cls(str(inner.get("msg", "")))


class StorageError(Exception):
    """The storage layer was used outside its contract."""
    pass


class RecordTooLarge(StorageError):
    pass
