"""
Real-time chat events.

Every chat operation that changes what members see ends by emitting one or
more events to an explicit set of recipients:

    ALERT              {"message": str, "chat_id": id}
    REFETCH_CHATS      no payload
    NEW_MESSAGE        {"message": {...}, "chat_id": id}
    NEW_MESSAGE_ALERT  {"chat_id": id}

Components:
    EventEmitter: Protocol for the outbound transport
    ChannelLayerEmitter: Default emitter; queues broadcast_chat_event, which
        fans events out over the Channels layer to per-user groups joined by
        ChatEventsConsumer
    ChatEventNotifier: Builds event names and payloads for each lifecycle
        action and hands them to an emitter

Delivery is fire-and-forget: the request only queues a Celery task, and
emit failures are logged by ChatEventNotifier, never raised into the
calling service.

Usage:
    from chat.events import ChatEventNotifier

    notifier = ChatEventNotifier(emitter)  # None selects CHAT_EVENT_EMITTER
    notifier.alert(member_ids, "Group chat renamed to Team", chat.id)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.utils.module_loading import import_string

from chat.constants import REALTIME_CONFIG

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class EventEmitter(Protocol):
    """Outbound real-time transport."""

    def emit(
        self,
        event: str,
        recipient_ids: Iterable[int],
        payload: dict[str, Any] | None = None,
    ) -> None:
        """Deliver `event` with `payload` to every recipient. Must not raise."""
        ...


def user_group_name(user_id: int) -> str:
    """Channel layer group every connection of `user_id` joins."""
    return f"{REALTIME_CONFIG.USER_GROUP_PREFIX}{user_id}"


class ChannelLayerEmitter:
    """
    Emit events through the configured Channels layer.

    emit() only queues the broadcast_chat_event task, so the calling request
    never waits on the channel layer. The task calls deliver(), which sends
    one `chat.event` message per recipient group and returns the recipients
    it could not reach.
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        if self._channel_layer is None:
            self._channel_layer = get_channel_layer()
        return self._channel_layer

    def emit(
        self,
        event: str,
        recipient_ids: Iterable[int],
        payload: dict[str, Any] | None = None,
    ) -> None:
        from chat.tasks import broadcast_chat_event

        recipients = list(dict.fromkeys(recipient_ids))
        if not recipients:
            return
        try:
            broadcast_chat_event.delay(event, recipients, payload)
        except Exception:
            logger.warning(
                f"Could not queue {event} event for {len(recipients)} recipient(s)",
                exc_info=True,
            )

    def deliver(
        self,
        event: str,
        recipient_ids: Iterable[int],
        payload: dict[str, Any] | None = None,
    ) -> list[int]:
        """
        Send `event` to each recipient's group.

        Failures for one recipient are logged and do not stop delivery to
        the others.

        Returns:
            Ids of the recipients whose group_send failed
        """
        layer = self.channel_layer
        if layer is None:
            logger.warning(f"No channel layer configured, dropping {event} event")
            return []

        message = {
            "type": REALTIME_CONFIG.CHANNEL_MESSAGE_TYPE,
            "event": event,
            "payload": payload,
        }
        group_send = async_to_sync(layer.group_send)
        failed = []
        for user_id in dict.fromkeys(recipient_ids):
            try:
                group_send(user_group_name(user_id), message)
            except Exception:
                logger.warning(
                    f"Failed to deliver {event} event to user {user_id}",
                    exc_info=True,
                )
                failed.append(user_id)
        logger.debug(f"Emitted {event}, {len(failed)} recipient(s) failed")
        return failed


def get_default_emitter() -> EventEmitter:
    """Instantiate the emitter class named by settings.CHAT_EVENT_EMITTER."""
    emitter_class = import_string(
        getattr(settings, "CHAT_EVENT_EMITTER", "chat.events.ChannelLayerEmitter")
    )
    return emitter_class()


class ChatEventNotifier:
    """
    Decide which event and payload each chat action produces.

    Recipient sets are chosen by the caller (the services), since they
    differ per action: e.g. a removal alerts the post-removal members but
    asks the pre-removal members to refetch their chat lists.

    The emitter is resolved on first use and every emit is guarded: a
    misconfigured or failing emitter is logged and the chat operation that
    already persisted its changes still succeeds.
    """

    def __init__(self, emitter: EventEmitter | None = None):
        self._emitter = emitter

    @property
    def emitter(self) -> EventEmitter:
        if self._emitter is None:
            self._emitter = get_default_emitter()
        return self._emitter

    def _emit(
        self,
        event: str,
        recipients: list[int],
        payload: dict[str, Any] | None = None,
    ) -> None:
        try:
            self.emitter.emit(event, recipients, payload)
        except Exception:
            logger.warning(
                f"Failed to emit {event} to {len(recipients)} recipient(s)",
                exc_info=True,
            )

    def alert(self, recipient_ids: Iterable[int], message: str, chat_id: int) -> None:
        self._emit(
            REALTIME_CONFIG.ALERT,
            list(recipient_ids),
            {"message": message, "chat_id": chat_id},
        )

    def refetch_chats(self, recipient_ids: Iterable[int]) -> None:
        self._emit(REALTIME_CONFIG.REFETCH_CHATS, list(recipient_ids))

    def new_message(
        self,
        recipient_ids: Iterable[int],
        message: dict[str, Any],
        chat_id: int,
    ) -> None:
        """Emit NEW_MESSAGE followed by its NEW_MESSAGE_ALERT companion."""
        recipients = list(recipient_ids)
        self._emit(
            REALTIME_CONFIG.NEW_MESSAGE,
            recipients,
            {"message": message, "chat_id": chat_id},
        )
        self._emit(
            REALTIME_CONFIG.NEW_MESSAGE_ALERT,
            recipients,
            {"chat_id": chat_id},
        )
