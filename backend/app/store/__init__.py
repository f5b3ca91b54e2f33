from app.store.base import Record, RecordStore, belongs_to, linked_id

__all__ = ["Record", "RecordStore", "belongs_to", "linked_id"]
