"""
Group invitations.

An invitation starts ``pending`` and moves once, to ``accepted`` or
``rejected``. The transition is a guarded UPDATE on ``status = 'pending'``,
so of two concurrent answers at most one takes effect.
"""

import logging
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from planner.models.group_invitation import GroupInvitation
from planner.models.group_member import GroupMember
from planner.models.enums import GroupRole, InvitationStatus
from planner.models.user import User
from planner.services.events import InvitationCreated, InvitationAccepted
from planner.services.group_services import get_group_by_id, get_membership
from planner.services.notification_service import stage_notifications
from planner.services.user_queries import get_user_by_id

logger = logging.getLogger(__name__)


def _invitation_query():
    return select(GroupInvitation).options(
        selectinload(GroupInvitation.group),
        selectinload(GroupInvitation.inviter),
    ).execution_options(populate_existing=True)


async def get_invitation(db: AsyncSession, invitation_id: int):
    q = _invitation_query().where(GroupInvitation.id == invitation_id)
    return (await db.execute(q)).scalar_one_or_none()


async def get_invitation_for(db: AsyncSession, group_id: int, user_id: int):
    q = _invitation_query().where(
        GroupInvitation.group_id == group_id,
        GroupInvitation.user_id == user_id,
    )
    return (await db.execute(q)).scalar_one_or_none()


async def list_pending_invitations(db: AsyncSession, user_id: int):
    q = (
        _invitation_query()
        .where(
            GroupInvitation.user_id == user_id,
            GroupInvitation.status == InvitationStatus.PENDING,
        )
        .order_by(GroupInvitation.created_at.desc(), GroupInvitation.id.desc())
    )
    return (await db.scalars(q)).all()


async def create_invitation(db: AsyncSession, group_id: int, user_id: int, invited_by: User):
    """
    Invite ``user_id`` to the group and notify them.

    Returns None when the user is already a member or has already been invited
    to this group, whatever that invitation's status.
    """
    group = await get_group_by_id(db, group_id)
    if not group:
        return None

    if await get_membership(db, group_id, user_id):
        return None

    if await get_invitation_for(db, group_id, user_id):
        logger.info("Invitation already exists group_id=%s user_id=%s", group_id, user_id)
        return None

    group_name = group.name
    inviter_name = invited_by.full_name or invited_by.username

    try:
        invitation = GroupInvitation(
            group_id=group_id,
            user_id=user_id,
            invited_by=invited_by.id,
        )
        db.add(invitation)
        await db.flush()  # generates invitation.id

        stage_notifications(
            db,
            InvitationCreated(
                invitation_id=invitation.id,
                group_name=group_name,
                invited_user_id=user_id,
                inviter_name=inviter_name,
            ),
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Invitation rolled back group_id=%s user_id=%s", group_id, user_id)
        return None

    logger.info("Invitation created id=%s group_id=%s user_id=%s", invitation.id, group_id, user_id)
    return await get_invitation(db, invitation.id)


async def respond_to_invitation(db: AsyncSession, invitation_id: int, response: InvitationStatus | str) -> bool:
    """
    Answer a pending invitation.

    Accepting adds a ``member`` membership and notifies the group's creator in
    the same transaction. Unknown ids and invitations that were already
    answered return False and change nothing.
    """
    response = InvitationStatus(response)
    if response == InvitationStatus.PENDING:
        return False

    invitation = await get_invitation(db, invitation_id)
    if not invitation or invitation.status != InvitationStatus.PENDING:
        return False

    group_id = invitation.group_id
    user_id = invitation.user_id
    group_name = invitation.group.name
    group_creator_id = invitation.group.creator_id

    try:
        res = await db.execute(
            update(GroupInvitation)
            .where(
                GroupInvitation.id == invitation_id,
                GroupInvitation.status == InvitationStatus.PENDING,
            )
            .values(status=response)
        )
        if res.rowcount == 0:
            # answered concurrently
            await db.rollback()
            return False

        if response == InvitationStatus.ACCEPTED:
            if not await get_membership(db, group_id, user_id):
                db.add(GroupMember(group_id=group_id, user_id=user_id, role=GroupRole.MEMBER))

            invitee = await get_user_by_id(db, user_id)
            stage_notifications(
                db,
                InvitationAccepted(
                    group_id=group_id,
                    group_name=group_name,
                    group_creator_id=group_creator_id,
                    accepted_by_name=invitee.full_name or invitee.username,
                ),
            )

        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Invitation response rolled back id=%s", invitation_id)
        return False

    logger.info("Invitation %s id=%s", response.value, invitation_id)
    return True
