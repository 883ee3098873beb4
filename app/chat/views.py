"""
ViewSets for chat API.

This module provides REST API endpoints for the chat system:
- ChatViewSet: Chat lifecycle, membership, messages and attachments

URL Structure:
    /api/v1/chat/chats/                              GET, POST
    /api/v1/chat/chats/direct/                       POST
    /api/v1/chat/chats/groups/                       GET
    /api/v1/chat/chats/{id}/                         GET, PATCH, DELETE
    /api/v1/chat/chats/{id}/members/                 POST
    /api/v1/chat/chats/{id}/members/{user_id}/       DELETE
    /api/v1/chat/chats/{id}/leave/                   POST
    /api/v1/chat/chats/{id}/messages/                GET, POST
    /api/v1/chat/chats/{id}/attachments/             POST (multipart "files")

Design Decisions:
    - Views only parse input and render output; all rules run in chat.services
    - Failed ServiceResults are rendered by core.views.failure_response, which
      maps the error category to the HTTP status
    - The authenticated user is passed to services as the requester
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from chat.serializers import (
    AddMembersSerializer,
    ChatDetailSerializer,
    ChatListSerializer,
    ChatPopulatedSerializer,
    ChatRenameSerializer,
    DirectChatCreateSerializer,
    GroupCreateSerializer,
    GroupListSerializer,
    MessageCreateSerializer,
    MessagePageSerializer,
    MessageSerializer,
)
from chat.services import (
    AttachmentService,
    ChatService,
    MembershipService,
    MessageService,
)
from core.views import failure_response


@extend_schema_view(
    list=extend_schema(
        operation_id="list_chats",
        summary="List my chats",
        responses=ChatListSerializer(many=True),
        tags=["Chat"],
    ),
    create=extend_schema(
        operation_id="create_group_chat",
        summary="Create group chat",
        request=GroupCreateSerializer,
        responses={201: ChatDetailSerializer},
        tags=["Chat"],
    ),
    retrieve=extend_schema(
        operation_id="get_chat",
        summary="Get chat details",
        parameters=[
            OpenApiParameter(
                "populate",
                OpenApiTypes.BOOL,
                description="Expand members to {id, name, avatar}",
            ),
        ],
        responses=ChatPopulatedSerializer,
        tags=["Chat"],
    ),
    partial_update=extend_schema(
        operation_id="rename_group_chat",
        summary="Rename group chat",
        request=ChatRenameSerializer,
        responses=ChatDetailSerializer,
        tags=["Chat"],
    ),
    destroy=extend_schema(
        operation_id="delete_chat",
        summary="Delete chat",
        responses={204: OpenApiResponse(description="Chat deleted")},
        tags=["Chat"],
    ),
)
class ChatViewSet(viewsets.ViewSet):
    """
    ViewSet for chat operations.

    list:
        Chats the current user is a member of.

    create:
        Create a group chat; the current user becomes its creator.

    retrieve:
        Chat details for a member. Pass ?populate=true to expand members.

    partial_update:
        Rename a group chat (creator only).

    destroy:
        Delete a chat with its messages and attachments. Groups can only be
        deleted by their creator, direct chats by either member.

    direct:
        Get or create the direct chat with another user.

    groups:
        Groups created by the current user.

    members:
        Add members (POST) / remove a member (DELETE .../members/{user_id}/).

    leave:
        Leave a group chat.

    messages:
        Page through messages (GET ?page=n) or send a text message (POST).

    attachments:
        Send up to 5 files as one message.
    """

    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def list(self, request):
        result = ChatService.list_chats(request.user)
        serializer = ChatListSerializer(result.data, many=True, context={"user": request.user})
        return Response(serializer.data)

    def create(self, request):
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.create_group(
            name=serializer.validated_data["name"],
            member_ids=serializer.validated_data["members"],
            creator=request.user,
        )
        if not result.success:
            return failure_response(result)

        return Response(ChatDetailSerializer(result.data).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        populate = request.query_params.get("populate", "").lower() == "true"
        result = ChatService.get_chat(pk, request.user, populate=populate)
        if not result.success:
            return failure_response(result)

        serializer_class = ChatPopulatedSerializer if populate else ChatDetailSerializer
        return Response(serializer_class(result.data).data)

    def partial_update(self, request, pk=None):
        serializer = ChatRenameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.rename(pk, serializer.validated_data["name"], request.user)
        if not result.success:
            return failure_response(result)

        return Response(ChatDetailSerializer(result.data).data)

    def destroy(self, request, pk=None):
        result = ChatService.delete(pk, request.user)
        if not result.success:
            return failure_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="create_direct_chat",
        summary="Get or create direct chat",
        request=DirectChatCreateSerializer,
        responses={201: ChatDetailSerializer},
        tags=["Chat"],
    )
    @action(detail=False, methods=["post"])
    def direct(self, request):
        serializer = DirectChatCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.create_direct(request.user, serializer.validated_data["user_id"])
        if not result.success:
            return failure_response(result)

        return Response(ChatDetailSerializer(result.data).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="list_my_groups",
        summary="List groups I created",
        responses=GroupListSerializer(many=True),
        tags=["Chat"],
    )
    @action(detail=False, methods=["get"])
    def groups(self, request):
        result = ChatService.list_groups(request.user)
        return Response(GroupListSerializer(result.data, many=True).data)

    @extend_schema(
        operation_id="add_group_members",
        summary="Add members to group",
        request=AddMembersSerializer,
        responses=ChatDetailSerializer,
        tags=["Chat - Members"],
    )
    @action(detail=True, methods=["post"], url_path="members")
    def members(self, request, pk=None):
        serializer = AddMembersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = MembershipService.add_members(
            pk, serializer.validated_data["members"], request.user
        )
        if not result.success:
            return failure_response(result)

        return Response(ChatDetailSerializer(result.data).data)

    @extend_schema(
        operation_id="remove_group_member",
        summary="Remove member from group",
        responses=ChatDetailSerializer,
        tags=["Chat - Members"],
    )
    @action(
        detail=True,
        methods=["delete"],
        url_path=r"members/(?P<user_id>[^/.]+)",
        url_name="member-detail",
    )
    def remove_member(self, request, pk=None, user_id=None):
        result = MembershipService.remove_member(pk, user_id, request.user)
        if not result.success:
            return failure_response(result)

        return Response(ChatDetailSerializer(result.data).data)

    @extend_schema(
        operation_id="leave_group",
        summary="Leave group",
        request=None,
        responses={200: OpenApiResponse(description="Left the group")},
        tags=["Chat - Members"],
    )
    @action(detail=True, methods=["post"])
    def leave(self, request, pk=None):
        result = MembershipService.leave(pk, request.user)
        if not result.success:
            return failure_response(result)

        return Response({"detail": "You have left the group"})

    @extend_schema(
        methods=["GET"],
        operation_id="list_messages",
        summary="List messages",
        parameters=[OpenApiParameter("page", OpenApiTypes.INT, description="1 = newest")],
        responses=MessagePageSerializer,
        tags=["Chat - Messages"],
    )
    @extend_schema(
        methods=["POST"],
        operation_id="send_message",
        summary="Send text message",
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
        tags=["Chat - Messages"],
    )
    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        if request.method == "POST":
            serializer = MessageCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)

            result = MessageService.send_message(
                pk, request.user, serializer.validated_data["content"]
            )
            if not result.success:
                return failure_response(result)
            return Response(MessageSerializer(result.data).data, status=status.HTTP_201_CREATED)

        result = MessageService.list_messages(
            pk, request.user, page=request.query_params.get("page", 1)
        )
        if not result.success:
            return failure_response(result)

        return Response(MessagePageSerializer(result.data).data)

    @extend_schema(
        operation_id="send_attachments",
        summary="Send attachments",
        request={
            "multipart/form-data": {
                "type": "object",
                "properties": {
                    "files": {"type": "array", "items": {"type": "string", "format": "binary"}}
                },
            }
        },
        responses={201: MessageSerializer},
        tags=["Chat - Messages"],
    )
    @action(detail=True, methods=["post"], parser_classes=[MultiPartParser, FormParser])
    def attachments(self, request, pk=None):
        files = request.FILES.getlist("files")
        result = AttachmentService.send_attachments(pk, files, request.user)
        if not result.success:
            return failure_response(result)

        return Response(MessageSerializer(result.data).data, status=status.HTTP_201_CREATED)
