from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.connection import Base
from app.enums.lifecycle_states import LifecycleState

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    size = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    attributes = Column(JSON, default=dict)

    unit_price = Column(Numeric(10, 2), nullable=False, default=0)

    lifecycle_state = Column(String(50), nullable=False, default=LifecycleState.draft.value, index=True)
    # mirrors lifecycle_state == active, written only by the lifecycle service
    is_active = Column(Boolean, nullable=False, default=False, index=True)

    created_by = Column(String(255), nullable=True)
    approved_by = Column(String(255), nullable=True)
    approved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="products")
    history = relationship(
        "LifecycleHistory",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="LifecycleHistory.id",
    )
