from models.base_model import Base, BaseModel, SoftDeleteMixin
from sqlalchemy import Boolean, Column, JSON, String
from sqlalchemy.orm import relationship


class User(SoftDeleteMixin, BaseModel, Base):
    __tablename__ = "users"
    # case-sensitive exact match as stored
    user_name = Column(String(128), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(32), nullable=True)
    password_hash = Column(String(255), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    roles = Column(JSON, nullable=True, default=lambda: ["user"])

    user_token = relationship(
        "UserToken",
        back_populates="user",
        uselist=False,
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
