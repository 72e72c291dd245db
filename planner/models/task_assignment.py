from sqlalchemy import Column, ForeignKey, Integer, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from planner.db.session import Base

class TaskAssignment(Base):
    __tablename__ = "task_assignments"
    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="uq_task_assignment_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    assigned_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now())

    task = relationship("Task", back_populates="assignees", lazy="raise")
    user = relationship("User", foreign_keys=[user_id], lazy="raise")
    assigner = relationship("User", foreign_keys=[assigned_by], lazy="raise")
