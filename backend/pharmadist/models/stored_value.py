"""
StoredValue: one JSON document per (namespace, key).

Namespaces are "global" for the shared medicine catalog and
"account:<id>" for everything owned by one account. The value column holds
serialised JSON text so the store can compare writes against what is already
persisted.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from pharmadist.db.base import Base


class StoredValue(Base):
    __tablename__ = "stored_values"
    __table_args__ = (UniqueConstraint("namespace", "key", name="uq_stored_values_namespace_key"),)

    id = Column(Integer, primary_key=True, index=True)
    namespace = Column(String(128), nullable=False, index=True)
    key = Column(String(128), nullable=False)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<StoredValue {self.namespace}/{self.key}>"
