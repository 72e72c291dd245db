from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false
from planner.db.session import Base

class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    members_can_create_tasks = Column(Boolean, nullable=False, server_default=false())
    is_archived = Column(Boolean, nullable=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    creator = relationship("User", lazy="raise")
    members = relationship(
        "GroupMember",
        back_populates="group",
        passive_deletes=True,
        lazy="raise",
    )
