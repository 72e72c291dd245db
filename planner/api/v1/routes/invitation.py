from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from planner.core.dependencies import get_db, get_current_user
from planner.models.enums import InvitationStatus
from planner.schemas.common import ok
from planner.schemas.invitation import InvitationOut, InvitationResponse
from planner.services.invitation_service import (
    get_invitation,
    list_pending_invitations,
    respond_to_invitation,
)

router = APIRouter()


@router.get("/")
async def pending(db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    rows = await list_pending_invitations(db, user.id)
    return ok([InvitationOut.model_validate(i) for i in rows])


@router.post("/{invitation_id}/respond")
async def respond(
    invitation_id: int,
    data: InvitationResponse,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    invitation = await get_invitation(db, invitation_id)
    if not invitation:
        raise HTTPException(404, "Invitation not found")

    if invitation.user_id != user.id:
        raise HTTPException(403, "This invitation is not addressed to you")

    if invitation.status != InvitationStatus.PENDING:
        raise HTTPException(400, "This invitation has already been answered")

    if not await respond_to_invitation(db, invitation_id, data.response):
        raise HTTPException(400, "This invitation has already been answered")

    message = "Invitation accepted" if data.response == "accepted" else "Invitation declined"
    return ok(message=message)
