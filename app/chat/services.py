"""
Chat system service layer.

This module provides the business logic for the chat system: the group
lifecycle, membership changes, attachments and the message feed.

Services:
    ChatService: Chat lifecycle (create group/direct, rename, delete, list, details)
    MembershipService: Membership changes (add, remove, leave)
    AttachmentService: Attachment messages (upload, persist, announce)
    MessageService: Text messages and the paginated message feed

Design Principles:
    - Services are stateless (use class methods)
    - The authenticated user is always an explicit `requester`/`sender` argument
    - Rules live in chat.policy; services load state, run the policy, persist
      and finally emit events through chat.events.ChatEventNotifier
    - Expected failures return ServiceResult.failure() carrying the error
      code and category of the chat exception that was raised
    - Database errors are logged and returned as INTERNAL_ERROR results
      through BaseService.handle_exception(); nothing is raised to callers
    - Event delivery happens after persistence and never fails the operation
    - Collaborators (event emitter, blob storage, successor picker) can be
      passed in per call; defaults come from settings

Usage:
    from chat.services import ChatService, MembershipService, MessageService

    result = ChatService.create_group("Project Team", [u2.id, u3.id], creator=user)
    if result.success:
        chat = result.data

    result = MembershipService.leave(chat.id, requester=user)

    result = MessageService.list_messages(chat.id, requester=user, page=2)
"""

from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.db.models import Prefetch

from core.exceptions import BaseApplicationError, InvalidIdentifierError
from core.services import BaseService, ServiceResult

from chat import policy
from chat.constants import ATTACHMENT_CONFIG, MEMBERSHIP_CONFIG, MESSAGE_CONFIG
from chat.events import ChatEventNotifier
from chat.exceptions import (
    BelowMinimumSizeError,
    ChatNotFoundError,
    ContentTooLongError,
    EmptyContentError,
    InvalidPageError,
    NoAttachmentsError,
    NotChatMemberError,
    SameUserError,
    TooManyAttachmentsError,
    UserNotFoundError,
)
from chat.models import Attachment, Chat, Message
from chat.pagination import MessagePage, count_pages, page_bounds
from chat.policy import ChatSnapshot
from chat.serializers import MessageSerializer
from chat.storage import get_default_storage

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from authentication.models import User
    from chat.events import EventEmitter
    from chat.storage import BlobRef, BlobStorage

User = get_user_model()


# =============================================================================
# Loaders
# =============================================================================


def parse_identifier(raw, label: str = "chat") -> int:
    """
    Parse a primary key coming from a URL or request body.

    Raises:
        InvalidIdentifierError: If raw is not a positive integer
    """
    if isinstance(raw, bool):
        raise InvalidIdentifierError(f"Invalid {label} id")
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidIdentifierError(f"Invalid {label} id") from None
    if value < 1:
        raise InvalidIdentifierError(f"Invalid {label} id")
    return value


def load_chat(chat_id, *, with_members: bool = False) -> Chat:
    """Fetch a chat by id, optionally prefetching members ordered by id."""
    queryset = Chat.objects.all()
    if with_members:
        queryset = queryset.prefetch_related(
            Prefetch("members", queryset=User.objects.order_by("id"))
        )
    chat = queryset.filter(pk=parse_identifier(chat_id, "chat")).first()
    if chat is None:
        raise ChatNotFoundError()
    return chat


def load_user(user_id) -> User:
    user = User.objects.filter(pk=parse_identifier(user_id, "user")).first()
    if user is None:
        raise UserNotFoundError()
    return user


def load_users(user_ids: Sequence[int]) -> list[User]:
    """
    Fetch users for the given ids, in the given order.

    Raises:
        UserNotFoundError: If any id has no user
    """
    users = User.objects.in_bulk(list(user_ids))
    missing = [user_id for user_id in user_ids if user_id not in users]
    if missing:
        raise UserNotFoundError(details={"user_ids": missing})
    return [users[user_id] for user_id in user_ids]


def _unique(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def _member_queryset(user: User):
    return (
        Chat.objects.filter(members=user)
        .prefetch_related(Prefetch("members", queryset=User.objects.order_by("id")))
        .order_by("-updated_at", "-id")
    )


def _message_payload(message: Message) -> dict:
    message = (
        Message.objects.select_related("sender")
        .prefetch_related("attachments")
        .get(pk=message.pk)
    )
    return MessageSerializer(message).data


def _announce_message(
    emitter: EventEmitter | None,
    recipient_ids: Sequence[int],
    message: Message,
    logger,
) -> None:
    """Emit NEW_MESSAGE/NEW_MESSAGE_ALERT for a message that is already saved."""
    try:
        payload = _message_payload(message)
    except DatabaseError:
        logger.warning(
            f"Could not build NEW_MESSAGE payload for message {message.id}, "
            f"skipping events",
            exc_info=True,
        )
        return
    ChatEventNotifier(emitter).new_message(recipient_ids, payload, message.chat_id)


def _schedule_purge(refs: list[BlobRef], logger) -> None:
    """Hand blob references that could not be deleted to purge_attachment_blobs."""
    from chat.tasks import purge_attachment_blobs

    try:
        purge_attachment_blobs.delay(refs)
    except Exception:
        logger.error(
            f"Could not queue purge of {len(refs)} orphaned blobs: "
            f"{[ref.get('public_id') for ref in refs]}",
            exc_info=True,
        )


# =============================================================================
# Chat Lifecycle
# =============================================================================


class ChatService(BaseService):
    """
    Service for chat lifecycle operations.

    Methods:
        create_group: Create a group chat owned by the requester
        create_direct: Get or create the direct chat between two users
        rename: Rename a group (creator only)
        delete: Delete a chat, its messages and their attachment blobs
        list_chats: Chats the requester is a member of
        list_groups: Groups the requester created
        get_chat: Chat details for a member
    """

    @classmethod
    def create_group(
        cls,
        name: str,
        member_ids: Iterable,
        creator: User,
        *,
        emitter: EventEmitter | None = None,
    ) -> ServiceResult[Chat]:
        """
        Create a group chat.

        The creator is always a member. Every other member id must resolve
        to a user, and the group must reach the minimum group size.

        Emits:
            ALERT "Welcome to {name} group" to all members
            REFETCH_CHATS to the members other than the creator

        Error codes:
            INVALID_IDENTIFIER, USER_NOT_FOUND, BELOW_MINIMUM_SIZE,
            INTERNAL_ERROR
        """
        try:
            requested = _unique(parse_identifier(raw, "user") for raw in member_ids)
            load_users([user_id for user_id in requested if user_id != creator.id])
            all_members = _unique([*requested, creator.id])
            if len(all_members) < MEMBERSHIP_CONFIG.MIN_GROUP_MEMBERS:
                raise BelowMinimumSizeError()

            with cls.atomic():
                chat = Chat.objects.create(name=name, is_group=True, creator=creator)
                chat.members.set(all_members)
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Creating group chat for user {creator.id}")

        cls.get_logger().info(
            f"Created group chat {chat.id} '{name}' by user {creator.id} "
            f"with {len(all_members)} members"
        )

        notifier = ChatEventNotifier(emitter)
        notifier.alert(all_members, f"Welcome to {name} group", chat.id)
        notifier.refetch_chats([user_id for user_id in all_members if user_id != creator.id])

        return ServiceResult.success(chat)

    @classmethod
    def create_direct(
        cls,
        requester: User,
        other_id,
        *,
        emitter: EventEmitter | None = None,
    ) -> ServiceResult[Chat]:
        """
        Create or retrieve the direct chat between requester and another user.

        Direct chats are unique per user pair; an existing chat is returned
        unchanged and no events are emitted for it.

        Error codes:
            INVALID_IDENTIFIER, SAME_USER, USER_NOT_FOUND, INTERNAL_ERROR
        """
        try:
            other_pk = parse_identifier(other_id, "user")
            if other_pk == requester.id:
                raise SameUserError("You cannot start a chat with yourself")
            other = load_user(other_pk)

            existing = (
                Chat.objects.filter(is_group=False, members=requester)
                .filter(members=other)
                .first()
            )
            if existing is not None:
                cls.get_logger().debug(
                    f"Found existing direct chat {existing.id} "
                    f"between users {requester.id} and {other.id}"
                )
                return ServiceResult.success(existing)

            with cls.atomic():
                chat = Chat.objects.create(is_group=False)
                chat.members.set([requester.id, other.id])
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(
                exc, f"Creating direct chat for user {requester.id}"
            )

        cls.get_logger().info(
            f"Created direct chat {chat.id} between users {requester.id} and {other.id}"
        )
        ChatEventNotifier(emitter).refetch_chats([requester.id, other.id])

        return ServiceResult.success(chat)

    @classmethod
    def rename(
        cls,
        chat_id,
        name: str,
        requester: User,
        *,
        emitter: EventEmitter | None = None,
    ) -> ServiceResult[Chat]:
        """
        Rename a group chat.

        Emits:
            ALERT "Group chat renamed to {name}" to all members

        Error codes:
            INVALID_IDENTIFIER, CHAT_NOT_FOUND, NOT_GROUP_CHAT, NOT_CHAT_CREATOR,
            INTERNAL_ERROR
        """
        try:
            chat = load_chat(chat_id)
            snapshot = ChatSnapshot.of(chat)
            policy.check_can_rename(snapshot, requester.id)

            old_name = chat.name
            chat.name = name
            chat.save(update_fields=["name", "updated_at"])
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Renaming chat {chat_id}")

        cls.get_logger().info(
            f"Renamed chat {chat.id} from '{old_name}' to '{name}' by user {requester.id}"
        )
        ChatEventNotifier(emitter).alert(
            snapshot.member_ids, f"Group chat renamed to {name}", chat.id
        )

        return ServiceResult.success(chat)

    @classmethod
    def delete(
        cls,
        chat_id,
        requester: User,
        *,
        emitter: EventEmitter | None = None,
        storage: BlobStorage | None = None,
    ) -> ServiceResult[None]:
        """
        Delete a chat together with its messages and attachment blobs.

        Blob deletion runs on a worker thread while the chat and its
        messages are deleted from the database. Blobs that fail to delete
        never block the chat deletion; they are handed to the
        purge_attachment_blobs task.

        Emits:
            REFETCH_CHATS to the members captured before deletion

        Error codes:
            INVALID_IDENTIFIER, CHAT_NOT_FOUND, NOT_CHAT_CREATOR, NOT_CHAT_MEMBER,
            INTERNAL_ERROR
        """
        try:
            chat = load_chat(chat_id)
            snapshot = ChatSnapshot.of(chat)
            policy.check_can_delete(snapshot, requester.id)
            refs = [
                attachment.as_ref()
                for attachment in Attachment.objects.filter(message__chat=chat).order_by(
                    "message_id", "position"
                )
            ]
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Loading chat {chat_id} for deletion")

        storage = storage or get_default_storage()
        db_error = None

        with ThreadPoolExecutor(max_workers=1) as pool:
            pending = pool.submit(storage.delete, refs)
            try:
                with cls.atomic():
                    message_count, _ = Message.objects.filter(chat=chat).delete()
                    chat.delete()
            except DatabaseError as exc:
                db_error = exc
            failed = cls._await_blob_deletion(pending, refs)

        if failed:
            _schedule_purge(failed, cls.get_logger())

        # Blob deletion is not rolled back; the rows stay and the chat can be deleted again
        if db_error is not None:
            return cls.handle_exception(db_error, f"Deleting chat {snapshot.chat_id}")

        cls.get_logger().info(
            f"Deleted chat {snapshot.chat_id} by user {requester.id}: "
            f"{message_count} rows, {len(refs)} blobs ({len(failed)} failed)"
        )

        ChatEventNotifier(emitter).refetch_chats(snapshot.member_ids)

        return ServiceResult.success(None)

    @classmethod
    def _await_blob_deletion(cls, pending, refs: list[BlobRef]) -> list[BlobRef]:
        try:
            return list(pending.result())
        except Exception:
            cls.get_logger().error(
                f"Blob storage raised while deleting {len(refs)} blobs", exc_info=True
            )
            return list(refs)

    @classmethod
    def list_chats(cls, requester: User) -> ServiceResult[list[Chat]]:
        """Chats the requester is a member of, most recently active first."""
        try:
            return ServiceResult.success(list(_member_queryset(requester)))
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Listing chats of user {requester.id}")

    @classmethod
    def list_groups(cls, requester: User) -> ServiceResult[list[Chat]]:
        """Group chats created by the requester."""
        try:
            chats = _member_queryset(requester).filter(is_group=True, creator=requester)
            return ServiceResult.success(list(chats))
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Listing groups of user {requester.id}")

    @classmethod
    def get_chat(
        cls,
        chat_id,
        requester: User,
        *,
        populate: bool = False,
    ) -> ServiceResult[Chat]:
        """
        Chat details for one of its members.

        With populate, members are prefetched for expansion to
        {id, name, avatar}.

        Error codes:
            INVALID_IDENTIFIER, CHAT_NOT_FOUND, NOT_CHAT_MEMBER
        """
        try:
            chat = load_chat(chat_id, with_members=populate)
            if not chat.is_member(requester.id):
                raise NotChatMemberError("You are not a member of this chat")
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Loading chat {chat_id}")
        return ServiceResult.success(chat)


# =============================================================================
# Membership
# =============================================================================


class MembershipService(BaseService):
    """
    Service for group membership changes.

    Methods:
        add_members: Creator adds users to a group
        remove_member: Creator removes one member
        leave: A member leaves; the creator's departure elects a successor
    """

    @classmethod
    def add_members(
        cls,
        chat_id,
        member_ids: Iterable,
        requester: User,
        *,
        emitter: EventEmitter | None = None,
    ) -> ServiceResult[Chat]:
        """
        Add users to a group chat.

        Candidates who are already members are skipped. The alert names all
        requested users.

        Emits:
            ALERT "{names} has been added in the group" and REFETCH_CHATS
            to the members after the addition

        Error codes:
            CHAT_NOT_FOUND, INVALID_IDENTIFIER, EMPTY_MEMBER_LIST,
            NOT_GROUP_CHAT, NOT_CHAT_CREATOR, MEMBER_LIMIT_EXCEEDED,
            USER_NOT_FOUND, INTERNAL_ERROR
        """
        try:
            chat = load_chat(chat_id)
            candidates = _unique(parse_identifier(raw, "user") for raw in member_ids)
            snapshot = ChatSnapshot.of(chat)
            new_ids = policy.check_can_add_members(snapshot, candidates, requester.id)
            candidate_users = load_users(candidates)

            with cls.atomic():
                if new_ids:
                    chat.members.add(*new_ids)
                chat.save(update_fields=["updated_at"])
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Adding members to chat {chat_id}")

        members_after = [*snapshot.member_ids, *new_ids]
        names = ", ".join(user.name for user in candidate_users)

        cls.get_logger().info(
            f"Added {len(new_ids)} member(s) to chat {chat.id} by user {requester.id}"
        )
        notifier = ChatEventNotifier(emitter)
        notifier.alert(members_after, f"{names} has been added in the group", chat.id)
        notifier.refetch_chats(members_after)

        return ServiceResult.success(chat)

    @classmethod
    def remove_member(
        cls,
        chat_id,
        target_id,
        requester: User,
        *,
        emitter: EventEmitter | None = None,
    ) -> ServiceResult[Chat]:
        """
        Remove one member from a group chat.

        Emits:
            ALERT "{name} has been removed from the group" to the members
            after removal; REFETCH_CHATS to the members before removal
            (so the removed user drops the chat)

        Error codes:
            CHAT_NOT_FOUND, USER_NOT_FOUND, INVALID_IDENTIFIER, NOT_GROUP_CHAT,
            NOT_CHAT_CREATOR, BELOW_MINIMUM_SIZE, TARGET_NOT_MEMBER,
            CANNOT_REMOVE_CREATOR, INTERNAL_ERROR
        """
        try:
            chat = load_chat(chat_id)
            target = load_user(target_id)
            snapshot = ChatSnapshot.of(chat)
            remaining = policy.check_can_remove_member(snapshot, target.id, requester.id)

            with cls.atomic():
                chat.members.remove(target)
                chat.save(update_fields=["updated_at"])
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Removing a member from chat {chat_id}")

        cls.get_logger().info(
            f"Removed user {target.id} from chat {chat.id} by user {requester.id}"
        )
        notifier = ChatEventNotifier(emitter)
        notifier.alert(remaining, f"{target.name} has been removed from the group", chat.id)
        notifier.refetch_chats(snapshot.member_ids)

        return ServiceResult.success(chat)

    @classmethod
    def leave(
        cls,
        chat_id,
        requester: User,
        *,
        emitter: EventEmitter | None = None,
        choose: Callable[[Sequence[int]], int] = random.choice,
    ) -> ServiceResult[Chat]:
        """
        Leave a group chat.

        When the creator leaves, `choose` picks the new creator from the
        remaining members.

        Emits:
            ALERT "{name} has left the group" to the remaining members

        Error codes:
            INVALID_IDENTIFIER, CHAT_NOT_FOUND, NOT_GROUP_CHAT,
            NOT_CHAT_MEMBER, BELOW_MINIMUM_SIZE, INTERNAL_ERROR
        """
        try:
            chat = load_chat(chat_id)
            snapshot = ChatSnapshot.of(chat)
            remaining, creator_id = policy.check_can_leave(snapshot, requester.id, choose)

            with cls.atomic():
                chat.members.remove(requester)
                chat.creator_id = creator_id
                chat.save(update_fields=["creator", "updated_at"])
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"User {requester.id} leaving chat {chat_id}")

        if creator_id != snapshot.creator_id:
            cls.get_logger().info(
                f"User {requester.id} left chat {chat.id}, creator passed to user {creator_id}"
            )
        else:
            cls.get_logger().info(f"User {requester.id} left chat {chat.id}")

        ChatEventNotifier(emitter).alert(
            remaining, f"{requester.name} has left the group", chat.id
        )

        return ServiceResult.success(chat)


# =============================================================================
# Attachments
# =============================================================================


class AttachmentService(BaseService):
    """Service for attachment messages."""

    @classmethod
    def send_attachments(
        cls,
        chat_id,
        files: Sequence,
        sender: User,
        *,
        emitter: EventEmitter | None = None,
        storage: BlobStorage | None = None,
    ) -> ServiceResult[Message]:
        """
        Upload files and post them as one message with empty content.

        Attachments keep the order of `files`. If the message cannot be
        saved, the uploaded blobs are deleted again; blobs that refuse to
        go are queued for purge_attachment_blobs.

        Emits:
            NEW_MESSAGE and NEW_MESSAGE_ALERT to all chat members

        Error codes:
            NO_ATTACHMENTS, TOO_MANY_ATTACHMENTS, INVALID_IDENTIFIER,
            CHAT_NOT_FOUND, NOT_CHAT_MEMBER, ATTACHMENT_UPLOAD_FAILED,
            INTERNAL_ERROR
        """
        storage = storage or get_default_storage()
        try:
            if not files:
                raise NoAttachmentsError()
            if len(files) > ATTACHMENT_CONFIG.MAX_ATTACHMENTS_PER_MESSAGE:
                raise TooManyAttachmentsError()
            chat = load_chat(chat_id)
            snapshot = ChatSnapshot.of(chat)
            if not snapshot.has_member(sender.id):
                raise NotChatMemberError("You are not a member of this chat")
            refs = storage.upload(files)
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Loading chat {chat_id} for attachments")

        try:
            with cls.atomic():
                message = Message.objects.create(chat=chat, sender=sender, content="")
                Attachment.objects.bulk_create(
                    Attachment(
                        message=message,
                        position=position,
                        public_id=ref["public_id"],
                        resource_type=ref["resource_type"],
                        url=ref["url"],
                    )
                    for position, ref in enumerate(refs)
                )
                chat.save(update_fields=["updated_at"])
        except DatabaseError as exc:
            cls._discard_uploads(storage, refs)
            return cls.handle_exception(
                exc, f"Saving attachment message in chat {chat.id}"
            )

        cls.get_logger().info(
            f"User {sender.id} sent {len(refs)} attachment(s) to chat {chat.id}"
        )
        _announce_message(emitter, snapshot.member_ids, message, cls.get_logger())

        return ServiceResult.success(message)

    @classmethod
    def _discard_uploads(cls, storage: BlobStorage, refs: list[BlobRef]) -> None:
        logger = cls.get_logger()
        logger.warning(f"Deleting {len(refs)} uploaded blobs of an unsaved message")
        try:
            failed = storage.delete(refs)
        except Exception:
            logger.error("Blob storage raised while discarding uploads", exc_info=True)
            failed = list(refs)
        if failed:
            _schedule_purge(failed, logger)


# =============================================================================
# Messages
# =============================================================================


class MessageService(BaseService):
    """
    Service for text messages and the message feed.

    Methods:
        send_message: Post a text message
        list_messages: One page of a chat's messages, oldest first
    """

    @classmethod
    def send_message(
        cls,
        chat_id,
        sender: User,
        content: str,
        *,
        emitter: EventEmitter | None = None,
    ) -> ServiceResult[Message]:
        """
        Post a text message to a chat the sender belongs to.

        Emits:
            NEW_MESSAGE and NEW_MESSAGE_ALERT to all chat members

        Error codes:
            INVALID_IDENTIFIER, CHAT_NOT_FOUND, NOT_CHAT_MEMBER,
            EMPTY_CONTENT, CONTENT_TOO_LONG, INTERNAL_ERROR
        """
        try:
            chat = load_chat(chat_id)
            snapshot = ChatSnapshot.of(chat)
            if not snapshot.has_member(sender.id):
                raise NotChatMemberError("You are not a member of this chat")
            content = (content or "").strip()
            if not content:
                raise EmptyContentError("Message content cannot be empty")
            if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
                raise ContentTooLongError(
                    f"Message content can't be longer than "
                    f"{MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters"
                )

            with cls.atomic():
                message = Message.objects.create(chat=chat, sender=sender, content=content)
                chat.save(update_fields=["updated_at"])
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Saving message in chat {chat_id}")

        cls.get_logger().info(f"User {sender.id} sent message {message.id} to chat {chat.id}")
        _announce_message(emitter, snapshot.member_ids, message, cls.get_logger())

        return ServiceResult.success(message)

    @classmethod
    def list_messages(
        cls,
        chat_id,
        requester: User,
        page=1,
    ) -> ServiceResult[MessagePage]:
        """
        One page of a chat's messages.

        Page 1 holds the newest MESSAGE_CONFIG.PAGE_SIZE messages; each page
        is returned oldest first. Pages past the last one are empty and
        never reach the database as an offset.

        Error codes:
            INVALID_IDENTIFIER, CHAT_NOT_FOUND, NOT_CHAT_MEMBER, INVALID_PAGE,
            INTERNAL_ERROR
        """
        try:
            chat = load_chat(chat_id)
            policy.check_can_view(ChatSnapshot.of(chat), requester.id)
            try:
                page_number = int(page)
            except (TypeError, ValueError):
                raise InvalidPageError("Page must be a positive integer") from None
            if page_number < 1:
                raise InvalidPageError("Page must be a positive integer")

            queryset = Message.objects.filter(chat=chat)
            total_pages = count_pages(queryset.count())
            if page_number > total_pages:
                window = []
            else:
                start, stop = page_bounds(page_number)
                window = list(
                    queryset.select_related("sender")
                    .prefetch_related("attachments")
                    .order_by("-created_at", "-id")[start:stop]
                )
                window.reverse()
        except BaseApplicationError as exc:
            return cls.fail(exc)
        except DatabaseError as exc:
            return cls.handle_exception(exc, f"Listing messages of chat {chat_id}")

        return ServiceResult.success(
            MessagePage(messages=window, page=page_number, total_pages=total_pages)
        )
