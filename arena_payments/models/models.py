from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func
from arena_payments.database import Base

class Record(Base):
    __tablename__ = "records"
    id = Column(Integer, primary_key=True)
    collection = Column(String, index=True, nullable=False)
    partition = Column(String, index=True, nullable=False)  # arena id or "all"
    record_id = Column(String, nullable=False)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    __table_args__ = (UniqueConstraint('collection', 'partition', 'record_id', name='uq_collection_partition_record'),)
