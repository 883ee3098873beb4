"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures: a group creator, three other users and an outsider
- Chat fixtures: minimum-size group, four-member group, direct chat
- In-memory collaborators: recording emitter and fake blob storage
- API client helpers for authenticated requests

Every test runs with CHAT_EVENT_EMITTER pointing at RecordingEmitter, so
services called without an explicit emitter (views, the WebSocket
consumer) never touch the channel layer; their events land in
RecordingEmitter.log.

Usage:
    def test_example(group, creator, emitter):
        result = ChatService.rename(group.id, "New", creator, emitter=emitter)
        assert emitter.names == ["ALERT"]
"""

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.tests.factories import DirectChatFactory, GroupChatFactory
from chat.tests.fakes import FakeBlobStorage, RecordingEmitter


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture(autouse=True)
def recording_emitter_setting(settings):
    """Route default event emission to RecordingEmitter for every test."""
    settings.CHAT_EVENT_EMITTER = "chat.tests.fakes.RecordingEmitter"
    RecordingEmitter.log.clear()
    yield RecordingEmitter.log
    RecordingEmitter.log.clear()


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def storage():
    return FakeBlobStorage()


@pytest.fixture
def make_files():
    """Build n small uploaded files: photo0.png, clip1.mp4, ..."""

    kinds = [("png", "image/png"), ("mp4", "video/mp4"), ("mp3", "audio/mpeg"), ("pdf", "application/pdf")]

    def _make(count):
        files = []
        for index in range(count):
            extension, content_type = kinds[index % len(kinds)]
            files.append(
                SimpleUploadedFile(
                    f"file{index}.{extension}",
                    f"blob {index}".encode(),
                    content_type=content_type,
                )
            )
        return files

    return _make


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def creator(db):
    """User who creates the test groups."""
    return UserFactory(name="Casey")


@pytest.fixture
def alice(db):
    return UserFactory(name="Alice")


@pytest.fixture
def bob(db):
    return UserFactory(name="Bob")


@pytest.fixture
def carol(db):
    return UserFactory(name="Carol")


@pytest.fixture
def outsider(db):
    """User who is not a member of any test chat."""
    return UserFactory(name="Olive")


# =============================================================================
# Chat Fixtures
# =============================================================================


@pytest.fixture
def group(creator, alice, bob):
    """Group at the minimum size: creator, alice, bob."""
    return GroupChatFactory(name="Team", creator=creator, members=[alice, bob])


@pytest.fixture
def big_group(creator, alice, bob, carol):
    """Four-member group: creator, alice, bob, carol."""
    return GroupChatFactory(name="Big Team", creator=creator, members=[alice, bob, carol])


@pytest.fixture
def direct_chat(alice, bob):
    return DirectChatFactory(members=[alice, bob])


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Return a factory building a JWT-authenticated client for a user."""

    def _client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _client


@pytest.fixture
def creator_client(client_for, creator):
    return client_for(creator)


@pytest.fixture
def alice_client(client_for, alice):
    return client_for(alice)


@pytest.fixture
def outsider_client(client_for, outsider):
    return client_for(outsider)
