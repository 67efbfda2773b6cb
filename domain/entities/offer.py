"""Модели оферты и её позиций."""

from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Integer
from sqlalchemy.orm import relationship
from .base import Base, generate_id, utc_now


class Offer(Base):
    """Коммерческое предложение по мероприятию."""

    __tablename__ = "offers"

    id = Column(String(36), primary_key=True, default=generate_id)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    offer_number = Column(String(100), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    items = relationship("OfferItem", back_populates="offer", order_by="OfferItem.display_order")


class OfferItem(Base):
    """Позиция оферты."""

    __tablename__ = "offer_items"

    id = Column(String(36), primary_key=True, default=generate_id)
    offer_id = Column(String(36), ForeignKey("offers.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(512), nullable=True)
    quantity = Column(Numeric(10, 2), nullable=True)
    unit = Column(String(50), nullable=True)
    unit_price = Column(Numeric(12, 2), nullable=True)
    total = Column(Numeric(12, 2), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)

    offer = relationship("Offer", back_populates="items")
