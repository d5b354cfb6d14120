import uuid
from sqlalchemy import TIMESTAMP, Boolean, Column, ForeignKey, String, Uuid, func
from sqlalchemy.orm import relationship
from passlib.context import CryptContext
from ..core.config import settings
from ..core.database import Base
from ..utils.enums import UserRole, UserStatus

bcrypt_context = CryptContext(
    schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=settings.BCRYPT_ROUNDS)


class Users(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey(
        "organizations.id", ondelete="CASCADE"), nullable=True, index=True)
    email = Column(String(200), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    password = Column(String(255), nullable=True)  # null for google users
    google_id = Column(String(64), nullable=True, unique=True)
    role = Column(String(16), nullable=False, default=UserRole.MEMBER.value)
    status = Column(String(16), nullable=False, default=UserStatus.ACTIVE.value)
    email_verified = Column(Boolean, default=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    organization = relationship(
        "Organization", back_populates="members", foreign_keys=[org_id])

    def set_password(self, password: str):
        self.password = bcrypt_context.hash(password)

    def verify_password(self, password: str) -> bool:
        if not self.password:
            return False
        return bcrypt_context.verify(password, self.password)
