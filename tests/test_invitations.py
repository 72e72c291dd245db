"""Tests for the invitation workflow."""
import pytest

from planner.models.enums import GroupRole, InvitationStatus, NotificationType
from planner.services.group_services import get_membership
from planner.services.invitation_service import (
    create_invitation,
    get_invitation,
    list_pending_invitations,
    respond_to_invitation,
)
from planner.services.notification_service import list_notifications
from tests.conftest import auth_headers


@pytest.mark.asyncio
async def test_invite_accept_then_answer_again(db_session, alice, bob, group):
    invitation = await create_invitation(db_session, group.id, bob.id, invited_by=alice)
    assert invitation.status == InvitationStatus.PENDING
    invitation_id = invitation.id

    bob_notes = await list_notifications(db_session, bob.id)
    assert [n.type for n in bob_notes] == [NotificationType.GROUP_INVITATION.value]
    assert bob_notes[0].related_id == invitation_id
    assert "Alice Admin" in bob_notes[0].message

    assert await respond_to_invitation(db_session, invitation_id, "accepted")

    membership = await get_membership(db_session, group.id, bob.id)
    assert membership is not None
    assert membership.role == GroupRole.MEMBER

    alice_notes = await list_notifications(db_session, alice.id)
    assert [n.type for n in alice_notes] == [NotificationType.INVITATION_ACCEPTED.value]

    assert not await respond_to_invitation(db_session, invitation_id, "rejected")
    assert (await get_invitation(db_session, invitation_id)).status == InvitationStatus.ACCEPTED


@pytest.mark.asyncio
async def test_rejection_is_final(db_session, alice, bob, group):
    invitation = await create_invitation(db_session, group.id, bob.id, invited_by=alice)
    invitation_id = invitation.id

    assert await respond_to_invitation(db_session, invitation_id, InvitationStatus.REJECTED)
    assert not await respond_to_invitation(db_session, invitation_id, InvitationStatus.ACCEPTED)

    assert (await get_invitation(db_session, invitation_id)).status == InvitationStatus.REJECTED
    assert await get_membership(db_session, group.id, bob.id) is None
    assert await list_pending_invitations(db_session, bob.id) == []

    # one invitation per (group, user), whatever its status
    assert await create_invitation(db_session, group.id, bob.id, invited_by=alice) is None


@pytest.mark.asyncio
async def test_members_cannot_be_invited(db_session, alice, group):
    assert await create_invitation(db_session, group.id, alice.id, invited_by=alice) is None


@pytest.mark.asyncio
async def test_unknown_invitation(db_session):
    assert not await respond_to_invitation(db_session, 31337, "accepted")


# ----------------------------------- HTTP


@pytest.mark.asyncio
async def test_invitation_flow_over_http(client, group, alice, bob, carol):
    resp = await client.post(
        f"/api/v1/groups/{group.id}/invite",
        json={"email": "bob@example.com"},
        headers=auth_headers(alice),
    )
    assert resp.status_code == 201
    invitation = resp.json()["data"]
    assert invitation["group"]["name"] == "Household"
    assert invitation["inviter"]["username"] == "alice"

    resp = await client.post(
        f"/api/v1/groups/{group.id}/invite",
        json={"email": "bob@example.com"},
        headers=auth_headers(alice),
    )
    assert resp.status_code == 409

    resp = await client.get("/api/v1/invitations/", headers=auth_headers(bob))
    assert [i["id"] for i in resp.json()["data"]] == [invitation["id"]]

    resp = await client.post(
        f"/api/v1/invitations/{invitation['id']}/respond",
        json={"response": "accepted"},
        headers=auth_headers(carol),
    )
    assert resp.status_code == 403

    resp = await client.post(
        f"/api/v1/invitations/{invitation['id']}/respond",
        json={"response": "maybe"},
        headers=auth_headers(bob),
    )
    assert resp.status_code == 400

    resp = await client.post(
        f"/api/v1/invitations/{invitation['id']}/respond",
        json={"response": "accepted"},
        headers=auth_headers(bob),
    )
    assert resp.status_code == 200

    resp = await client.post(
        f"/api/v1/invitations/{invitation['id']}/respond",
        json={"response": "rejected"},
        headers=auth_headers(bob),
    )
    assert resp.status_code == 400

    resp = await client.get(f"/api/v1/groups/{group.id}", headers=auth_headers(bob))
    assert resp.status_code == 200

    resp = await client.post(
        f"/api/v1/groups/{group.id}/invite",
        json={"email": "bob@example.com"},
        headers=auth_headers(alice),
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_invite_checks(client, group, alice, bob):
    resp = await client.post(
        f"/api/v1/groups/{group.id}/invite",
        json={"email": "ghost@example.com"},
        headers=auth_headers(alice),
    )
    assert resp.status_code == 404

    resp = await client.post(
        f"/api/v1/groups/{group.id}/invite",
        json={"email": "alice@example.com"},
        headers=auth_headers(bob),
    )
    assert resp.status_code == 403
