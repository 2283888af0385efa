from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.orm import relationship

from leave_api.db.session import Base


class Manager(Base):
    """Pairs an employee with the user who approves their leave."""

    __tablename__ = "usermanagement"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    user = relationship("User", foreign_keys=[user_id], lazy="joined")
    manager = relationship("User", foreign_keys=[manager_id], lazy="joined")
