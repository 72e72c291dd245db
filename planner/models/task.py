from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from planner.db.session import Base
from planner.models.enums import TaskStatus, TaskPriority, enum_values

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(TaskStatus, native_enum=False, values_callable=enum_values, length=16),
        nullable=False,
        default=TaskStatus.PENDING,
        server_default=TaskStatus.PENDING.value,
    )
    priority = Column(
        Enum(TaskPriority, native_enum=False, values_callable=enum_values, length=16),
        nullable=False,
        default=TaskPriority.MEDIUM,
        server_default=TaskPriority.MEDIUM.value,
    )
    due_date = Column(Date, nullable=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    subgroup_id = Column(Integer, ForeignKey("subgroups.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    group = relationship("Group", lazy="raise")
    subgroup = relationship("Subgroup", lazy="raise")
    creator = relationship("User", lazy="raise")
    assignees = relationship(
        "TaskAssignment",
        back_populates="task",
        order_by="[TaskAssignment.assigned_at.desc(), TaskAssignment.id.desc()]",
        passive_deletes=True,
        lazy="raise",
    )

    @property
    def group_name(self):
        return self.group.name

    @property
    def subgroup_name(self):
        return self.subgroup.name if self.subgroup is not None else None
