import pytest

from app.core.exceptions import ConflictError, InvalidOperationError, NotFoundError
from app.models.social import FriendRequestStatusEnum
from app.repositories.base import repository_for
from app.repositories.social_repo import SocialRepository


async def test_self_follow_never_creates_row(storage, make_user):
    alice = await make_user("alice")
    repo = repository_for(SocialRepository, storage)

    assert await repo.toggle_follow(alice.user_id, alice.user_id) is False
    assert await repo.toggle_follow(alice.user_id, alice.user_id) is False
    assert await repo.is_following(alice.user_id, alice.user_id) is False
    assert await repo.count_following(alice.user_id) == 0


async def test_toggle_follow_and_lists(storage, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    repo = repository_for(SocialRepository, storage)

    assert await repo.toggle_follow(alice.user_id, bob.user_id) is True
    assert await repo.is_following(alice.user_id, bob.user_id) is True
    assert await repo.list_following_ids(alice.user_id) == [bob.user_id]
    assert [u.username for u in await repo.list_followers(bob.user_id)] == ["alice"]
    assert await repo.count_followers(bob.user_id) == 1

    assert await repo.toggle_follow(alice.user_id, bob.user_id) is False
    assert await repo.list_following(alice.user_id) == []
    assert await repo.count_followers(bob.user_id) == 0


async def test_reverse_friend_request_conflicts(storage, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    repo = repository_for(SocialRepository, storage)

    await repo.send_friend_request(alice.user_id, bob.user_id)
    with pytest.raises(ConflictError):
        await repo.send_friend_request(bob.user_id, alice.user_id)
    with pytest.raises(ConflictError):
        await repo.send_friend_request(alice.user_id, bob.user_id)


async def test_self_friend_request_rejected(storage, make_user):
    alice = await make_user("alice")
    repo = repository_for(SocialRepository, storage)
    with pytest.raises(InvalidOperationError):
        await repo.send_friend_request(alice.user_id, alice.user_id)


async def test_friendship_status_is_symmetric(storage, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    repo = repository_for(SocialRepository, storage)

    assert await repo.get_friendship_status(alice.user_id, bob.user_id) == "none"

    request = await repo.send_friend_request(alice.user_id, bob.user_id)
    assert await repo.get_friendship_status(alice.user_id, bob.user_id) == "pending_sent"
    assert await repo.get_friendship_status(bob.user_id, alice.user_id) == "pending_received"

    await repo.respond_to_friend_request(request.request_id, FriendRequestStatusEnum.accepted)
    assert await repo.get_friendship_status(alice.user_id, bob.user_id) == "friends"
    assert await repo.get_friendship_status(bob.user_id, alice.user_id) == "friends"
    assert [u.username for u in await repo.list_friends(alice.user_id)] == ["bob"]
    assert await repo.count_friends(bob.user_id) == 1


async def test_resolved_request_is_terminal(storage, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    repo = repository_for(SocialRepository, storage)

    request = await repo.send_friend_request(alice.user_id, bob.user_id)
    rejected = await repo.respond_to_friend_request(request.request_id, FriendRequestStatusEnum.rejected)
    assert rejected.status == FriendRequestStatusEnum.rejected

    with pytest.raises(InvalidOperationError):
        await repo.respond_to_friend_request(request.request_id, FriendRequestStatusEnum.accepted)

    # 被拒絕後視為 none，但同一對使用者不能再次邀請
    assert await repo.get_friendship_status(bob.user_id, alice.user_id) == "none"
    with pytest.raises(ConflictError):
        await repo.send_friend_request(bob.user_id, alice.user_id)
    assert await repo.count_friends(alice.user_id) == 0


async def test_respond_to_missing_request(storage):
    repo = repository_for(SocialRepository, storage)
    with pytest.raises(NotFoundError):
        await repo.respond_to_friend_request("missing", FriendRequestStatusEnum.accepted)


async def test_list_friend_requests_pending_only(storage, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    repo = repository_for(SocialRepository, storage)

    first = await repo.send_friend_request(alice.user_id, carol.user_id)
    await repo.send_friend_request(bob.user_id, carol.user_id)
    await repo.respond_to_friend_request(first.request_id, FriendRequestStatusEnum.accepted)

    received = await repo.list_friend_requests(carol.user_id, "received")
    assert [r.requester.username for r in received] == ["bob"]
    assert received[0].target.username == "carol"

    sent = await repo.list_friend_requests(bob.user_id, "sent")
    assert len(sent) == 1
    assert await repo.list_friend_requests(alice.user_id, "sent") == []
