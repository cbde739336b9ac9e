from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class CrawlStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Base(DeclarativeBase):
    pass


class CrawlQueueItem(Base):
    __tablename__ = "crawl_queue"

    # integer ids double as the FIFO tiebreak after created_at
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    url: Mapped[str] = mapped_column(Text(), unique=True)
    depth: Mapped[int] = mapped_column(Integer, default=0)
    is_seed_domain: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str] = mapped_column(String(20), default=CrawlStatus.PENDING.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_crawl_queue_status_depth_created", "status", "depth", "created_at"),)


class Media(Base):
    __tablename__ = "media"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    url: Mapped[str] = mapped_column(Text())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    hostname: Mapped[str] = mapped_column(String(255), unique=True)

    address1: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    address2: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    zip: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    facebook: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    twitter: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    instagram: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    linkedin: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    youtube: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    tiktok: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    discord: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    github: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)

    favicon_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("media.id", ondelete="SET NULL"), nullable=True
    )
    og_image_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("media.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    favicon: Mapped[Optional[Media]] = relationship(foreign_keys=[favicon_id])
    og_image: Mapped[Optional[Media]] = relationship(foreign_keys=[og_image_id])
    nodes: Mapped[List["Node"]] = relationship(
        back_populates="property", cascade="all, delete-orphan", passive_deletes=True
    )


class Node(Base):
    __tablename__ = "nodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    url: Mapped[str] = mapped_column(Text(), unique=True)
    title: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    keywords: Mapped[List[str]] = mapped_column(JSON, default=list)
    industry: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    audience: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    technologies: Mapped[List[str]] = mapped_column(JSON, default=list)
    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    property: Mapped[Property] = relationship(back_populates="nodes")


# Columns the enrichment pipeline may write on a Property.
PROPERTY_ADDRESS_FIELDS = ("address1", "address2", "city", "state", "zip", "country")
PROPERTY_SOCIAL_FIELDS = ("facebook", "twitter", "instagram", "linkedin", "youtube", "tiktok", "discord", "github")
NODE_CONTENT_FIELDS = ("title", "description", "summary", "keywords", "industry", "audience", "technologies")


def create_schema(engine: Engine) -> None:
    """Idempotent DDL: creates missing tables, leaves existing ones alone."""
    Base.metadata.create_all(engine)
