from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from leave_api.db.session import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("annual_leave_balance >= 0", name="ck_users_balance_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    firstname = Column(String(30), nullable=False)
    surname = Column(String(30), nullable=False)

    # Never serialized; see leave_api.domains.users.router._sanitize
    hashed_password = Column(String(255), nullable=False)
    salt = Column(String(64), nullable=False)

    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    annual_leave_balance = Column(Integer, nullable=False, default=25)

    created_at = Column(DateTime, default=datetime.utcnow)

    role = relationship("Role", lazy="joined")
