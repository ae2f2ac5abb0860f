#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixins for the SecurityNet API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps (server-side defaults)
- SoftDeleteMixin: a deleted_at status column, filtered by the stores at query time

Put SoftDeleteMixin FIRST in a model's bases:
    class Association(SoftDeleteMixin, BaseModel, Base): ...
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

# Importing 'models' gives access to the global 'storage' instance (DBStorage)
import models

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Declarative base for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC now; token expiry columns are stored without tz info."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at, updated_at.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Attribute initialization via kwargs. Timestamps are left to DB defaults
        unless passed explicitly.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id}>"


class SoftDeleteMixin:
    """
    Adds a deleted_at timestamp; delete() only marks the row.
    Rows with deleted_at set are hidden by the stores, not by the database.
    """

    deleted_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def restore(self):
        """Clear deleted_at and commit."""
        self.deleted_at = None
        models.storage.new(self)
        models.storage.save()

    def soft_delete(self):
        """Set deleted_at and commit."""
        self.deleted_at = datetime.now(timezone.utc)
        models.storage.new(self)
        models.storage.save()

    def delete(self):
        self.soft_delete()
