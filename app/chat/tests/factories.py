"""
Factory Boy factories for chat models.

Provides realistic test data generation for:
- Chat: Group chats (with creator and members) and direct chats
- Message: Text messages
- Attachment: Blob references attached to a message

Usage:
    from chat.tests.factories import (
        AttachmentFactory,
        DirectChatFactory,
        GroupChatFactory,
        MessageFactory,
    )

    # Group with creator plus two more members
    chat = GroupChatFactory()

    # Group with explicit members (creator is added automatically)
    chat = GroupChatFactory(creator=owner, members=[alice, bob])

    # Direct chat between two users
    chat = DirectChatFactory(members=[alice, bob])

    # Message with two attachments
    message = MessageFactory(chat=chat, sender=owner)
    AttachmentFactory.create_batch(2, message=message)
"""

import factory

from authentication.tests.factories import UserFactory
from chat.models import Attachment, Chat, Message


class GroupChatFactory(factory.django.DjangoModelFactory):
    """
    Factory for group chats.

    The creator is always a member. Without explicit members, two extra
    users are created so the group starts at the minimum group size.

    Examples:
        chat = GroupChatFactory(name="Project Team")
        chat = GroupChatFactory(members=UserFactory.create_batch(4))
    """

    class Meta:
        model = Chat
        skip_postgeneration_save = True

    name = factory.Sequence(lambda n: f"Group Chat {n}")
    is_group = True
    creator = factory.SubFactory(UserFactory)

    @factory.post_generation
    def members(self, create, extracted, **kwargs):
        if not create:
            return
        others = extracted if extracted is not None else UserFactory.create_batch(2)
        self.members.add(self.creator, *others)


class DirectChatFactory(factory.django.DjangoModelFactory):
    """
    Factory for direct chats.

    Examples:
        chat = DirectChatFactory()
        chat = DirectChatFactory(members=[alice, bob])
    """

    class Meta:
        model = Chat
        skip_postgeneration_save = True

    name = ""
    is_group = False
    creator = None

    @factory.post_generation
    def members(self, create, extracted, **kwargs):
        if not create:
            return
        self.members.add(*(extracted if extracted is not None else UserFactory.create_batch(2)))


class MessageFactory(factory.django.DjangoModelFactory):
    """
    Factory for text messages.

    The chat's creator (or a new user) is the sender unless one is given.
    """

    class Meta:
        model = Message

    chat = factory.SubFactory(GroupChatFactory)
    sender = factory.LazyAttribute(lambda obj: obj.chat.creator or UserFactory())
    content = factory.Faker("sentence")


class AttachmentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Attachment

    message = factory.SubFactory(MessageFactory, content="")
    position = factory.Sequence(lambda n: n)
    public_id = factory.Sequence(lambda n: f"chat/attachments/{n:04d}/photo.png")
    resource_type = Attachment.ResourceType.IMAGE
    url = factory.LazyAttribute(lambda obj: f"/media/{obj.public_id}")
