from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.connection import Base

class LifecycleHistory(Base):
    __tablename__ = "product_lifecycle_history"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    old_state = Column(String(50), nullable=True)  # null for the creation entry
    new_state = Column(String(50), nullable=False)
    changed_by = Column(String(255), nullable=False)
    changed_at = Column(DateTime, default=datetime.utcnow, index=True)
    notes = Column(Text, nullable=True)

    product = relationship("Product", back_populates="history")
