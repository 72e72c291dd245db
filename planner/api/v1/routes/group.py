from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from planner.core.dependencies import get_db, get_current_user, require_group_member, require_group_admin
from planner.models.enums import GroupRole
from planner.schemas.common import ok
from planner.schemas.group import (
    ArchiveRequest,
    GroupCreate,
    GroupMemberOut,
    GroupOut,
    GroupUpdate,
    InviteRequest,
    RoleUpdate,
)
from planner.schemas.invitation import InvitationOut
from planner.schemas.subgroup import SubgroupCreate, SubgroupOut
from planner.schemas.task import TaskOut
from planner.services.group_services import (
    create_group,
    delete_group,
    get_group_by_id,
    get_group_members,
    get_membership,
    list_archived_groups_for_user,
    list_groups_for_user,
    remove_member_and_cleanup,
    set_group_archived,
    update_group,
    update_member_role,
)
from planner.services.invitation_service import create_invitation
from planner.services.permissions import is_group_admin
from planner.services.subgroup_services import create_subgroup, list_subgroups
from planner.services.task_services import list_tasks_by_group
from planner.services.user_queries import get_user_by_email

router = APIRouter()


@router.get("/")
async def my_groups(db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    groups = await list_groups_for_user(db, user.id)
    return ok([GroupOut.model_validate(g) for g in groups])


@router.post("/", status_code=201)
async def create_new_group(
    data: GroupCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    group = await create_group(
        db,
        name=data.name,
        creator_id=user.id,
        description=data.description,
        members_can_create_tasks=data.members_can_create_tasks,
    )
    if not group:
        raise HTTPException(500, "The group could not be created")

    return ok(GroupOut.model_validate(group), "Group created")


@router.get("/archived")
async def my_archived_groups(db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    groups = await list_archived_groups_for_user(db, user.id)
    return ok([GroupOut.model_validate(g) for g in groups])


@router.get("/{group_id}")
async def get_group(group_id: int, db: AsyncSession = Depends(get_db), user=Depends(require_group_member)):
    group = await get_group_by_id(db, group_id)
    return ok(GroupOut.model_validate(group))


@router.put("/{group_id}")
async def edit_group(
    group_id: int,
    data: GroupUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_group_admin),
):
    group = await update_group(db, group_id, data)
    if not group:
        raise HTTPException(404, "Group not found")

    return ok(GroupOut.model_validate(group), "Group updated")


@router.delete("/{group_id}")
async def remove_group(group_id: int, db: AsyncSession = Depends(get_db), user=Depends(require_group_admin)):
    if not await delete_group(db, group_id):
        raise HTTPException(404, "Group not found")

    return ok(message="Group deleted")


@router.post("/{group_id}/archive")
async def archive_group(
    group_id: int,
    data: ArchiveRequest,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_group_admin),
):
    group = await set_group_archived(db, group_id, data.archive)
    if not group:
        raise HTTPException(404, "Group not found")

    message = "Group archived" if data.archive else "Group restored from archive"
    return ok(GroupOut.model_validate(group), message)


# ----------------------------------- members


@router.get("/{group_id}/members")
async def members(group_id: int, db: AsyncSession = Depends(get_db), user=Depends(require_group_member)):
    rows = await get_group_members(db, group_id)
    return ok([GroupMemberOut.model_validate(m) for m in rows])


@router.delete("/{group_id}/members/{user_id}")
async def remove_member(
    group_id: int,
    user_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    current_user_id = user.id
    is_self_removal = current_user_id == user_id

    if not is_self_removal and not await is_group_admin(db, group_id, current_user_id):
        raise HTTPException(403, "You must be a group admin to remove members")

    removed_by = None if is_self_removal else current_user_id
    if not await remove_member_and_cleanup(db, group_id, user_id, removed_by=removed_by):
        raise HTTPException(404, "Membership not found")

    message = "You left the group" if is_self_removal else "Member removed from the group"
    return ok(message=message)


@router.put("/{group_id}/members/{user_id}/role")
async def change_member_role(
    group_id: int,
    user_id: int,
    data: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_group_admin),
):
    if user.id == user_id and data.role != GroupRole.ADMIN:
        raise HTTPException(400, "You cannot remove your own admin role")

    if not await update_member_role(db, group_id, user_id, data.role):
        raise HTTPException(404, "Membership not found")

    message = "Member promoted to admin" if data.role == GroupRole.ADMIN else "Member set to regular member"
    return ok(message=message)


@router.post("/{group_id}/invite", status_code=201)
async def invite(
    group_id: int,
    data: InviteRequest,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_group_admin),
):
    invited = await get_user_by_email(db, data.email)
    if not invited:
        raise HTTPException(404, "No user is registered with this email address")

    if await get_membership(db, group_id, invited.id):
        raise HTTPException(409, "This user is already a member of the group")

    invitation = await create_invitation(db, group_id, invited.id, invited_by=user)
    if not invitation:
        raise HTTPException(409, "This user has already been invited to the group")

    return ok(InvitationOut.model_validate(invitation), "Invitation sent")


# ----------------------------------- tasks & subgroups


@router.get("/{group_id}/tasks")
async def group_tasks(group_id: int, db: AsyncSession = Depends(get_db), user=Depends(require_group_member)):
    tasks = await list_tasks_by_group(db, group_id)
    return ok([TaskOut.model_validate(t) for t in tasks])


@router.get("/{group_id}/subgroups")
async def subgroups(group_id: int, db: AsyncSession = Depends(get_db), user=Depends(require_group_member)):
    rows = await list_subgroups(db, group_id)
    return ok([SubgroupOut.model_validate(s) for s in rows])


@router.get("/{group_id}/subgroups/archived")
async def archived_subgroups(group_id: int, db: AsyncSession = Depends(get_db), user=Depends(require_group_member)):
    rows = await list_subgroups(db, group_id, archived=True)
    return ok([SubgroupOut.model_validate(s) for s in rows])


@router.post("/{group_id}/subgroups", status_code=201)
async def new_subgroup(
    group_id: int,
    data: SubgroupCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_group_member),
):
    subgroup = await create_subgroup(
        db,
        name=data.name,
        group_id=group_id,
        creator_id=user.id,
        description=data.description,
    )
    return ok(SubgroupOut.model_validate(subgroup), "Subgroup created")
