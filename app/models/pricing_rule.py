from sqlalchemy import Column, Integer, String, Numeric, Boolean, Date, DateTime, ForeignKey
import datetime
from app.database.connection import Base


class PricingRule(Base):
    __tablename__ = "pricing_rules"

    id = Column(Integer, primary_key=True, index=True)
    rule_name = Column(String(255), nullable=False)
    rule_type = Column(String(50), nullable=False, index=True)  # bulk / promotion / category
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=True, index=True
    )
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=True, index=True
    )
    min_quantity = Column(Integer, default=1)
    discount_percentage = Column(Numeric(5, 2), nullable=False)
    valid_from = Column(Date, nullable=True)
    valid_until = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)
