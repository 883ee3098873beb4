"""
Membership policy for chats.

Pure decision functions: no database access, no events. Each check raises
a chat exception (see chat.exceptions) naming the violated rule, or returns
the values the caller needs to persist. Services load a ChatSnapshot,
run the relevant check and only then mutate state, so a failed check never
leaves a partial change behind.

Rules:
    - Only the creator of a group chat may add/remove members, rename or
      delete it
    - A group never grows beyond MEMBERSHIP_CONFIG.MAX_GROUP_MEMBERS through
      add_members, and never shrinks below MIN_GROUP_MEMBERS through
      remove/leave
    - When the creator leaves, a successor is picked at random from the
      remaining members
    - Either member of a direct chat may delete it

Usage:
    from chat.policy import ChatSnapshot, check_can_leave

    snapshot = ChatSnapshot.of(chat)
    remaining, creator_id = check_can_leave(snapshot, requester.id)
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chat.constants import MEMBERSHIP_CONFIG
from chat.exceptions import (
    BelowMinimumSizeError,
    CreatorRemovalError,
    EmptyMemberListError,
    MemberLimitExceededError,
    NotChatCreatorError,
    NotChatMemberError,
    NotGroupChatError,
    TargetNotMemberError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from chat.models import Chat


@dataclass(frozen=True)
class ChatSnapshot:
    """
    Immutable view of the membership state of one chat.

    Attributes:
        chat_id: Primary key of the chat
        is_group: Whether the chat is a group chat
        creator_id: Group creator id (None for direct chats)
        member_ids: Member ids, ordered by id
    """

    chat_id: int
    is_group: bool
    creator_id: int | None
    member_ids: tuple[int, ...]

    @classmethod
    def of(cls, chat: Chat) -> ChatSnapshot:
        """Capture the current membership of a persisted chat."""
        return cls(
            chat_id=chat.pk,
            is_group=chat.is_group,
            creator_id=chat.creator_id,
            member_ids=tuple(chat.member_ids()),
        )

    def has_member(self, user_id: int) -> bool:
        return user_id in self.member_ids


def can_mutate_members(chat: ChatSnapshot, requester_id: int) -> bool:
    """True iff the chat is a group and the requester is its creator."""
    return chat.is_group and chat.creator_id == requester_id


def _require_creator(chat: ChatSnapshot, requester_id: int, action: str) -> None:
    if not can_mutate_members(chat, requester_id):
        raise NotChatCreatorError(f"You are not allowed to {action}")


def check_is_group(chat: ChatSnapshot) -> None:
    if not chat.is_group:
        raise NotGroupChatError()


def check_can_add_members(
    chat: ChatSnapshot,
    candidate_ids: Iterable[int],
    requester_id: int | None = None,
) -> list[int]:
    """
    Validate adding candidates to a group and return the ids to insert.

    Checks run in order: non-empty candidates, group chat, creator (only
    when requester_id is given), size limit. Candidates already in the
    chat are skipped and duplicates collapsed, keeping first-seen order.

    Returns:
        The new unique member ids (possibly empty if all were members)

    Raises:
        EmptyMemberListError, NotGroupChatError, NotChatCreatorError,
        MemberLimitExceededError
    """
    candidates = list(candidate_ids)
    if not candidates:
        raise EmptyMemberListError()
    check_is_group(chat)
    if requester_id is not None:
        _require_creator(chat, requester_id, "add members")

    existing = set(chat.member_ids)
    new_unique: list[int] = []
    for candidate in candidates:
        if candidate in existing:
            continue
        existing.add(candidate)
        new_unique.append(candidate)

    if len(chat.member_ids) + len(new_unique) > MEMBERSHIP_CONFIG.MAX_GROUP_MEMBERS:
        raise MemberLimitExceededError()
    return new_unique


def check_can_remove_member(
    chat: ChatSnapshot,
    target_id: int,
    requester_id: int | None = None,
) -> list[int]:
    """
    Validate removing one member from a group.

    Checks run in order: group chat, creator (when requester_id is given),
    minimum size, target membership. The creator cannot remove themselves;
    they have to leave instead so a successor gets elected.

    Returns:
        The member ids after removal
    """
    check_is_group(chat)
    if requester_id is not None:
        _require_creator(chat, requester_id, "remove members")
    if len(chat.member_ids) - 1 < MEMBERSHIP_CONFIG.MIN_GROUP_MEMBERS:
        raise BelowMinimumSizeError()
    if not chat.has_member(target_id):
        raise TargetNotMemberError()
    if target_id == chat.creator_id:
        raise CreatorRemovalError()
    return [member_id for member_id in chat.member_ids if member_id != target_id]


def check_can_leave(
    chat: ChatSnapshot,
    requester_id: int,
    choose: Callable[[Sequence[int]], int] = random.choice,
) -> tuple[list[int], int | None]:
    """
    Validate the requester leaving a group and elect a successor if needed.

    Args:
        chat: Current membership
        requester_id: Member who is leaving
        choose: Picks the new creator from the remaining members

    Returns:
        (remaining member ids, creator id after the departure)

    Raises:
        NotGroupChatError, NotChatMemberError, BelowMinimumSizeError
    """
    check_is_group(chat)
    if not chat.has_member(requester_id):
        raise NotChatMemberError("You are not a member of this group")

    remaining = [member_id for member_id in chat.member_ids if member_id != requester_id]
    if len(remaining) < MEMBERSHIP_CONFIG.MIN_GROUP_MEMBERS:
        raise BelowMinimumSizeError()

    creator_id = chat.creator_id
    if requester_id == creator_id:
        creator_id = choose(remaining)
    return remaining, creator_id


def check_can_rename(chat: ChatSnapshot, requester_id: int) -> None:
    check_is_group(chat)
    _require_creator(chat, requester_id, "rename the group")


def check_can_delete(chat: ChatSnapshot, requester_id: int) -> None:
    """
    Group chats may only be deleted by their creator, direct chats by
    either member.
    """
    if chat.is_group:
        if chat.creator_id != requester_id:
            raise NotChatCreatorError("You are not allowed to delete the group")
    elif not chat.has_member(requester_id):
        raise NotChatMemberError("You are not allowed to delete the chat")


def check_can_view(chat: ChatSnapshot, requester_id: int) -> None:
    """Only current members may read a chat or its messages."""
    if not chat.has_member(requester_id):
        raise NotChatMemberError(
            "You are not allowed to view the messages or may be you've been "
            "removed from the group"
        )
