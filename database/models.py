from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, UniqueConstraint
from database.database import Base


def _now():
    return datetime.now(timezone.utc)


class TransactionModel(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Float, nullable=False)
    description = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    category = Column(String, nullable=False, default="Other", index=True)
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


class BudgetModel(Base):
    __tablename__ = "budgets"
    __table_args__ = (
        # Un seul budget par catégorie et par période
        UniqueConstraint("category", "month", "year", name="uq_budget_category_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)  # >= 2000
    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)
