from sqlalchemy import (
    Column, String, Boolean,
    DateTime, BigInteger, ForeignKey,
    Float, Integer, Index, text as sa_text,
)
from sqlalchemy.sql import func

from src.tracker.infra.db import Base

# sqlite only autoincrements INTEGER PRIMARY KEY
PK = BigInteger().with_variant(Integer, "sqlite")


class UserORM(Base):
    __tablename__ = "users"

    id = Column(PK, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=sa_text("true"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class SubscriptionORM(Base):
    __tablename__ = "subscriptions"

    id = Column(PK, primary_key=True, autoincrement=True)
    user_id = Column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    tier = Column(String, nullable=False)
    status = Column(String, nullable=False)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=True)


class ChartORM(Base):
    __tablename__ = "charts"

    id = Column(PK, primary_key=True, autoincrement=True)
    user_id = Column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_charts_user_updated", "user_id", "updated_at"),
        Index("idx_charts_user_category", "user_id", "category"),
    )


class DataPointORM(Base):
    __tablename__ = "data_points"

    id = Column(PK, primary_key=True, autoincrement=True)
    chart_id = Column(
        BigInteger,
        ForeignKey("charts.id", ondelete="CASCADE"),
        nullable=False,
    )
    measurement = Column(Float, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_data_points_chart_date", "chart_id", "date"),
    )
