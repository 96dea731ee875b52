import uuid
from datetime import datetime

from sqlalchemy import (
    String,
    DateTime,
    JSON,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from ..db import Base


def uuid_str() -> str:
    return uuid.uuid4().hex


class Document(Base):
    """One JSON document of a logical collection under a namespace."""
    __tablename__ = "documents"

    pk: Mapped[str] = mapped_column(String(32), primary_key=True, default=uuid_str)
    namespace: Mapped[str] = mapped_column(String(100), nullable=False)
    collection: Mapped[str] = mapped_column(String(100), nullable=False)  # e.g. "sudsTypes", "appSettings"
    doc_id: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("namespace", "collection", "doc_id", name="uq_document_path"),
        Index("ix_documents_namespace_collection", "namespace", "collection"),
    )
