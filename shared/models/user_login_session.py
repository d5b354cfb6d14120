import uuid
from sqlalchemy import (
    Column, String, Boolean, ForeignKey, TIMESTAMP, Uuid, func
)
from sqlalchemy.orm import relationship
from ..core.database import Base


class UserLoginSession(Base):
    __tablename__ = "user_login_sessions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey(
        "users.id", ondelete="CASCADE"), nullable=False)
    ip_address = Column(String(50), nullable=True)
    user_agent = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    last_accessed_at = Column(TIMESTAMP(timezone=True),
                              server_default=func.now(), onupdate=func.now())

    user = relationship("Users", backref="login_sessions")
