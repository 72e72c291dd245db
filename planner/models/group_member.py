from sqlalchemy import Column, ForeignKey, Integer, DateTime, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from planner.db.session import Base
from planner.models.enums import GroupRole, enum_values

class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_member_user"),
    )

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(
        Enum(GroupRole, native_enum=False, values_callable=enum_values, length=16),
        nullable=False,
        default=GroupRole.MEMBER,
        server_default=GroupRole.MEMBER.value,
    )
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", back_populates="members", lazy="raise")
    user = relationship("User", lazy="raise")
