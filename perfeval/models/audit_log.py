from sqlalchemy import Column, Integer, String, Text, DateTime, func
from perfeval.core.database import Base


class AuditLog(Base):
    """Who changed what: one row per audited mutation, with JSON before/after snapshots."""
    __tablename__ = "audit_log"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    action = Column(String(100), nullable=False, index=True)
    table_name = Column(String(100), nullable=True)
    record_id = Column(Integer, nullable=True)
    old_values = Column(Text, nullable=True)
    new_values = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
