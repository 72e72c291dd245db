from sqlalchemy import Column, ForeignKey, Integer, DateTime, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from planner.db.session import Base
from planner.models.enums import InvitationStatus, enum_values

class GroupInvitation(Base):
    __tablename__ = "group_invitations"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_invitation_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    invited_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(
        Enum(InvitationStatus, native_enum=False, values_callable=enum_values, length=16),
        nullable=False,
        default=InvitationStatus.PENDING,
        server_default=InvitationStatus.PENDING.value,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", lazy="raise")
    inviter = relationship("User", foreign_keys=[invited_by], lazy="raise")
