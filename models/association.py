from sqlalchemy import Boolean, Column, String

from models.base_model import BaseModel, Base, SoftDeleteMixin


class Association(SoftDeleteMixin, BaseModel, Base):
    __tablename__ = "associations"

    name = Column(String(128), nullable=False)  # not unique; validate non-empty in schema
    website = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
