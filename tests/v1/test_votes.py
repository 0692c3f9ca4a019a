# tests/v1/test_votes.py
"""Tests for vote-related endpoints."""

import sqlite3

from fastapi import status
from sqlalchemy.exc import OperationalError

from parley_stage.api.v1 import dependencies as deps
from parley_stage.models import NO_TICKET
from tests.factories import as_identity, make_identity, make_post, reload_identity, reload_post

VOTES_URL = "/api/v1/votes"
VOTER = "203.0.113.60"


def _vote(client, post_id: int, like: bool = True, address: str = VOTER):
    return client.post(
        VOTES_URL,
        json={"postId": post_id, "voteAction": like},
        headers=as_identity(address),
    )


def test_like_with_matching_ticket(client, db_session, author, author_thread) -> None:
    make_identity(db_session, VOTER, view_ticket=author_thread.id)

    response = _vote(client, author_thread.id, like=True)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == [{"id": author_thread.id, "likes": 1, "dislikes": 0}]

    voter = reload_identity(db_session, VOTER)
    assert voter.likes_sent == 1
    assert voter.view_ticket == NO_TICKET
    assert reload_identity(db_session, author.address).likes_received == 1
    assert reload_post(db_session, author_thread.id).likes == 1


def test_dislike_on_reply_counts_against_reply(client, db_session, author, author_thread) -> None:
    reply = make_post(db_session, author.address, "reply", reply_to=author_thread)
    make_identity(db_session, VOTER, view_ticket=author_thread.id)

    response = _vote(client, reply.id, like=False)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == [
        {"id": author_thread.id, "likes": 0, "dislikes": 0},
        {"id": reply.id, "likes": 0, "dislikes": 1},
    ]
    assert reload_identity(db_session, VOTER).dislikes_sent == 1
    assert reload_identity(db_session, author.address).dislikes_received == 1


def test_second_vote_with_same_ticket_is_forbidden(client, db_session, author_thread) -> None:
    make_identity(db_session, VOTER, view_ticket=author_thread.id)

    assert _vote(client, author_thread.id).status_code == status.HTTP_200_OK
    response = _vote(client, author_thread.id)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "User cannot vote on this post"
    assert reload_post(db_session, author_thread.id).likes == 1


def test_vote_on_other_thread_is_forbidden(client, db_session, author, author_thread) -> None:
    other_thread = make_post(db_session, author.address, "elsewhere")
    make_identity(db_session, VOTER, view_ticket=author_thread.id)

    response = _vote(client, other_thread.id)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    voter = reload_identity(db_session, VOTER)
    assert voter.view_ticket == author_thread.id
    assert voter.likes_sent == 0


def test_vote_without_ticket_is_forbidden(client, db_session, author_thread) -> None:
    make_identity(db_session, VOTER)

    response = _vote(client, author_thread.id)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_vote_from_unknown_identity_is_not_found(client, author_thread) -> None:
    response = _vote(client, author_thread.id, address="203.0.113.61")

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_vote_on_missing_post_is_not_found(client, db_session) -> None:
    make_identity(db_session, VOTER, view_ticket=5)

    response = _vote(client, 99999)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert reload_identity(db_session, VOTER).view_ticket == 5


def test_vote_on_post_without_author_record_skips_payout(client, db_session) -> None:
    orphan = make_post(db_session, "1.1.1.1", "anonymous thread")
    make_identity(db_session, VOTER, view_ticket=orphan.id)

    response = _vote(client, orphan.id)

    assert response.status_code == status.HTTP_200_OK
    voter = reload_identity(db_session, VOTER)
    assert voter.view_ticket == NO_TICKET
    assert voter.likes_sent == 1
    assert reload_post(db_session, orphan.id).likes == 1
    assert reload_identity(db_session, "1.1.1.1") is None


def test_unknown_vote_action_is_bad_request(client, db_session, author_thread) -> None:
    make_identity(db_session, VOTER, view_ticket=author_thread.id)

    response = client.post(
        VOTES_URL,
        json={"postId": author_thread.id, "voteAction": "sideways"},
        headers=as_identity(VOTER),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert reload_identity(db_session, VOTER).view_ticket == author_thread.id


def test_new_identity_full_flow(client, db_session, fake_gate, author, author_thread) -> None:
    """verify -> post with CAPTCHA -> vote once -> second vote refused."""
    newcomer = "203.0.113.62"

    verify = client.get("/api/v1/verify", headers=as_identity(newcomer))
    assert verify.json() == {"captchaRequired": True}

    post = client.post(
        "/api/v1/posts",
        json={"postContent": "hello"},
        headers=as_identity(newcomer, **{"captcha-token": "solved"}),
    )
    assert post.status_code == status.HTTP_200_OK
    shown = post.json()
    assert [item["id"] for item in shown] == [author_thread.id]
    assert reload_identity(db_session, newcomer).view_ticket == author_thread.id

    first = _vote(client, shown[0]["id"], address=newcomer)
    assert first.status_code == status.HTTP_200_OK
    identity = reload_identity(db_session, newcomer)
    assert identity.likes_sent == 1
    assert identity.view_ticket == NO_TICKET

    second = _vote(client, shown[0]["id"], address=newcomer)
    assert second.status_code == status.HTTP_403_FORBIDDEN


def test_storage_timeout_is_reported_as_unavailable(client, app, db_session, mocker) -> None:
    make_identity(db_session, VOTER, view_ticket=1)
    votes = mocker.Mock()
    votes.cast_vote.side_effect = OperationalError(
        "UPDATE identity", {}, sqlite3.OperationalError("database is locked")
    )
    app.dependency_overrides[deps.get_vote_ledger] = lambda: votes
    try:
        response = _vote(client, 1)
    finally:
        app.dependency_overrides.pop(deps.get_vote_ledger, None)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    votes.cast_vote.assert_called_once_with(db_session, VOTER, 1, True)
