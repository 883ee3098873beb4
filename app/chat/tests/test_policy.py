"""
Tests for the chat membership policy.

The policy functions are pure: they work on ChatSnapshot values and never
touch the database, so these tests build snapshots directly.

Test Organization:
    - One class per policy check
    - Check ordering is asserted where two rules could both apply
"""

import pytest

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
from chat.policy import (
    ChatSnapshot,
    can_mutate_members,
    check_can_add_members,
    check_can_delete,
    check_can_leave,
    check_can_remove_member,
    check_can_rename,
    check_can_view,
)

CREATOR = 1


def group_of(*member_ids, creator_id=CREATOR):
    return ChatSnapshot(chat_id=10, is_group=True, creator_id=creator_id, member_ids=tuple(member_ids))


def direct_of(first, second):
    return ChatSnapshot(chat_id=20, is_group=False, creator_id=None, member_ids=(first, second))


# =============================================================================
# TestCanMutateMembers
# =============================================================================


class TestCanMutateMembers:
    """
    Tests for can_mutate_members().

    Verifies:
    - Only the creator of a group may mutate it
    """

    def test_creator_of_group_can_mutate(self):
        assert can_mutate_members(group_of(1, 2, 3), CREATOR) is True

    def test_other_member_cannot_mutate(self):
        assert can_mutate_members(group_of(1, 2, 3), 2) is False

    def test_nobody_mutates_direct_chat(self):
        assert can_mutate_members(direct_of(1, 2), 1) is False


# =============================================================================
# TestCheckCanAddMembers
# =============================================================================


class TestCheckCanAddMembers:
    """
    Tests for check_can_add_members().

    Verifies:
    - Empty candidate lists are rejected first
    - Direct chats and non-creators are rejected
    - The group never exceeds the maximum size
    - Existing members and duplicates are skipped
    """

    def test_returns_new_unique_ids_in_order(self):
        """
        Existing members and repeated ids are collapsed.

        Why it matters: The caller inserts exactly these ids, so duplicates
        would break the membership set.
        """
        chat = group_of(1, 2, 3)

        assert check_can_add_members(chat, [5, 2, 4, 5], CREATOR) == [5, 4]

    def test_all_existing_members_returns_empty_list(self):
        assert check_can_add_members(group_of(1, 2, 3), [2, 3], CREATOR) == []

    def test_empty_candidates_rejected_before_other_checks(self):
        """
        An empty list fails even on a direct chat with a stranger.

        Why it matters: Clients get the most actionable message first.
        """
        with pytest.raises(EmptyMemberListError) as exc_info:
            check_can_add_members(direct_of(1, 2), [], requester_id=99)

        assert exc_info.value.message == "Please provide members to add"

    def test_direct_chat_rejected(self):
        with pytest.raises(NotGroupChatError) as exc_info:
            check_can_add_members(direct_of(1, 2), [3], requester_id=1)

        assert exc_info.value.message == "This is not a group chat"

    def test_non_creator_rejected(self):
        with pytest.raises(NotChatCreatorError) as exc_info:
            check_can_add_members(group_of(1, 2, 3), [4], requester_id=2)

        assert exc_info.value.message == "You are not allowed to add members"

    def test_requester_check_skipped_when_not_given(self):
        assert check_can_add_members(group_of(1, 2, 3), [4]) == [4]

    def test_reaching_maximum_is_allowed(self):
        members = list(range(1, MEMBERSHIP_CONFIG.MAX_GROUP_MEMBERS))
        chat = group_of(*members)

        assert check_can_add_members(chat, [1000], CREATOR) == [1000]

    def test_exceeding_maximum_rejected(self):
        """
        101 members would exceed the limit.

        Why it matters: The group size cap must hold no matter how many
        members are requested in one call.
        """
        chat = group_of(*range(1, MEMBERSHIP_CONFIG.MAX_GROUP_MEMBERS + 1))

        with pytest.raises(MemberLimitExceededError) as exc_info:
            check_can_add_members(chat, [1000], CREATOR)

        assert exc_info.value.message == "Group members limit reached"

    def test_limit_counts_only_new_members(self):
        chat = group_of(*range(1, MEMBERSHIP_CONFIG.MAX_GROUP_MEMBERS + 1))

        assert check_can_add_members(chat, [2, 3], CREATOR) == []


# =============================================================================
# TestCheckCanRemoveMember
# =============================================================================


class TestCheckCanRemoveMember:
    """
    Tests for check_can_remove_member().

    Verifies:
    - Direct chats and non-creators are rejected
    - Groups never shrink below the minimum size
    - Only current non-creator members can be removed
    """

    def test_returns_remaining_members(self):
        assert check_can_remove_member(group_of(1, 2, 3, 4), 3, CREATOR) == [1, 2, 4]

    def test_direct_chat_rejected(self):
        with pytest.raises(NotGroupChatError):
            check_can_remove_member(direct_of(1, 2), 2, 1)

    def test_non_creator_rejected(self):
        with pytest.raises(NotChatCreatorError):
            check_can_remove_member(group_of(1, 2, 3, 4), 3, requester_id=2)

    def test_minimum_size_group_rejected(self):
        """
        Removing from a 3-member group would leave 2.

        Why it matters: A group with fewer than 3 members is no longer a
        valid group.
        """
        with pytest.raises(BelowMinimumSizeError) as exc_info:
            check_can_remove_member(group_of(1, 2, 3), 2, CREATOR)

        assert exc_info.value.message == "Group must have at least 3 members"

    def test_size_checked_before_target_membership(self):
        with pytest.raises(BelowMinimumSizeError):
            check_can_remove_member(group_of(1, 2, 3), 99, CREATOR)

    def test_non_member_target_rejected(self):
        with pytest.raises(TargetNotMemberError):
            check_can_remove_member(group_of(1, 2, 3, 4), 99, CREATOR)

    def test_creator_cannot_remove_themselves(self):
        with pytest.raises(CreatorRemovalError):
            check_can_remove_member(group_of(1, 2, 3, 4), CREATOR, CREATOR)


# =============================================================================
# TestCheckCanLeave
# =============================================================================


class TestCheckCanLeave:
    """
    Tests for check_can_leave().

    Verifies:
    - Only group members can leave a group
    - Groups never shrink below the minimum size
    - The creator's departure elects a successor via `choose`
    """

    def test_member_leaving_keeps_creator(self):
        remaining, creator_id = check_can_leave(group_of(1, 2, 3, 4), 3)

        assert remaining == [1, 2, 4]
        assert creator_id == CREATOR

    def test_creator_leaving_elects_successor_from_remaining(self):
        """
        The successor is picked from the members left behind.

        Why it matters: A group must always have a creator who is a member.
        """
        picked_from = []

        def choose(candidates):
            picked_from.append(list(candidates))
            return candidates[-1]

        remaining, creator_id = check_can_leave(group_of(1, 2, 3, 4), CREATOR, choose)

        assert picked_from == [[2, 3, 4]]
        assert remaining == [2, 3, 4]
        assert creator_id == 4

    def test_default_choose_picks_a_remaining_member(self):
        for _ in range(20):
            _, creator_id = check_can_leave(group_of(1, 2, 3, 4), CREATOR)
            assert creator_id in {2, 3, 4}

    def test_choose_not_called_when_member_leaves(self):
        def choose(candidates):
            raise AssertionError("successor election should not run")

        check_can_leave(group_of(1, 2, 3, 4), 2, choose)

    def test_minimum_size_group_rejected(self):
        with pytest.raises(BelowMinimumSizeError):
            check_can_leave(group_of(1, 2, 3), 2)

    def test_non_member_rejected(self):
        with pytest.raises(NotChatMemberError):
            check_can_leave(group_of(1, 2, 3, 4), 99)

    def test_direct_chat_rejected(self):
        with pytest.raises(NotGroupChatError):
            check_can_leave(direct_of(1, 2), 1)


# =============================================================================
# TestRenameDeleteView
# =============================================================================


class TestRenameDeleteView:
    """
    Tests for check_can_rename(), check_can_delete() and check_can_view().

    Verifies:
    - Rename is creator-only and group-only
    - Groups are deleted by their creator, direct chats by either member
    - Only members may view a chat
    """

    def test_creator_can_rename(self):
        check_can_rename(group_of(1, 2, 3), CREATOR)

    def test_member_cannot_rename(self):
        with pytest.raises(NotChatCreatorError) as exc_info:
            check_can_rename(group_of(1, 2, 3), 2)

        assert exc_info.value.message == "You are not allowed to rename the group"

    def test_direct_chat_cannot_be_renamed(self):
        with pytest.raises(NotGroupChatError):
            check_can_rename(direct_of(1, 2), 1)

    def test_creator_can_delete_group(self):
        check_can_delete(group_of(1, 2, 3), CREATOR)

    def test_member_cannot_delete_group(self):
        with pytest.raises(NotChatCreatorError) as exc_info:
            check_can_delete(group_of(1, 2, 3), 2)

        assert exc_info.value.message == "You are not allowed to delete the group"

    def test_either_member_can_delete_direct_chat(self):
        check_can_delete(direct_of(1, 2), 1)
        check_can_delete(direct_of(1, 2), 2)

    def test_stranger_cannot_delete_direct_chat(self):
        with pytest.raises(NotChatMemberError):
            check_can_delete(direct_of(1, 2), 3)

    def test_member_can_view(self):
        check_can_view(group_of(1, 2, 3), 2)

    def test_non_member_cannot_view(self):
        with pytest.raises(NotChatMemberError) as exc_info:
            check_can_view(group_of(1, 2, 3), 99)

        assert exc_info.value.category == "forbidden"
