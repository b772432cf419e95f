# tradedocs/errors.py
from __future__ import annotations


class TradeDocsError(Exception):
    pass


# =========================
# Stamp pipeline
# =========================

class StampError(TradeDocsError):
    pass


class UnsupportedFormat(StampError):
    pass


class DecodeError(StampError):
    pass


class TooLarge(StampError):
    def __init__(self, size: int, limit: int, kind: str, unit: str = "bytes"):
        super().__init__(f"{kind} stamp is {size} {unit}, limit is {limit} {unit}")
        self.unit = unit
        self.size = size
        self.limit = limit
        self.kind = kind


# =========================
# Records / rendering
# =========================

class RecordNotFound(TradeDocsError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection}/{record_id} not found")
        self.collection = collection
        self.record_id = record_id


class MissingRequiredEntity(TradeDocsError):
    """
    A related record the renderer cannot do without (supplier/client of an
    inspection request) did not resolve.
    """

    def __init__(self, collection: str, record_id: str | None):
        super().__init__(f"Missing required {collection} record: {record_id or '(none)'}")
        self.collection = collection
        self.record_id = record_id


class ValidationError(TradeDocsError):
    pass
