"""
UserToken model: the single refresh token record of a user.
Fields:
- user_id (String(36)) - FK to users.id, unique: one row per user
- refresh_token - opaque base64 string, null once invalidated
- refresh_token_expires_at - naive UTC; at/before now means expired
"""
from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class UserToken(BaseModel, Base):
    __tablename__ = "user_tokens"

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    refresh_token = Column(String(88), nullable=True, index=True)
    refresh_token_expires_at = Column(DateTime(), nullable=True)

    user = relationship("User", back_populates="user_token")

    def __repr__(self):
        return f"<UserToken user_id={self.user_id} expires_at={self.refresh_token_expires_at}>"
