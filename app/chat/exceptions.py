"""
Chat domain errors.

Raised by chat.policy and the chat service loaders, converted into failed
ServiceResults at the service boundary. Each class pins the error_code
clients switch on; the category comes from the core base class unless
overridden.

    NotGroupChatError          not_group_chat
    EmptyMemberListError       validation
    MemberLimitExceededError   validation
    BelowMinimumSizeError      validation
    TargetNotMemberError       validation
    CreatorRemovalError        validation
    NoAttachmentsError         validation
    TooManyAttachmentsError    validation
    EmptyContentError          validation
    ContentTooLongError        validation
    InvalidPageError           validation
    SameUserError              validation
    NotChatCreatorError        forbidden
    NotChatMemberError         forbidden
    ChatNotFoundError          not_found
    UserNotFoundError          not_found
"""

from core.exceptions import NotFoundError, PermissionDeniedError, ValidationError


class NotGroupChatError(ValidationError):
    default_error_code = "NOT_GROUP_CHAT"
    category = "not_group_chat"

    def __init__(self, message: str = "This is not a group chat", **kwargs):
        super().__init__(message, **kwargs)


class EmptyMemberListError(ValidationError):
    default_error_code = "EMPTY_MEMBER_LIST"

    def __init__(self, message: str = "Please provide members to add", **kwargs):
        super().__init__(message, **kwargs)


class MemberLimitExceededError(ValidationError):
    default_error_code = "MEMBER_LIMIT_EXCEEDED"

    def __init__(self, message: str = "Group members limit reached", **kwargs):
        super().__init__(message, **kwargs)


class BelowMinimumSizeError(ValidationError):
    default_error_code = "BELOW_MINIMUM_SIZE"

    def __init__(self, message: str = "Group must have at least 3 members", **kwargs):
        super().__init__(message, **kwargs)


class NoAttachmentsError(ValidationError):
    default_error_code = "NO_ATTACHMENTS"

    def __init__(self, message: str = "Please provide attachments", **kwargs):
        super().__init__(message, **kwargs)


class TooManyAttachmentsError(ValidationError):
    default_error_code = "TOO_MANY_ATTACHMENTS"

    def __init__(self, message: str = "Files can't be more than 5.", **kwargs):
        super().__init__(message, **kwargs)


class TargetNotMemberError(ValidationError):
    default_error_code = "TARGET_NOT_MEMBER"

    def __init__(self, message: str = "User is not a member of this group", **kwargs):
        super().__init__(message, **kwargs)


class CreatorRemovalError(ValidationError):
    default_error_code = "CANNOT_REMOVE_CREATOR"

    def __init__(
        self, message: str = "The group creator cannot be removed, leave the group instead", **kwargs
    ):
        super().__init__(message, **kwargs)


class EmptyContentError(ValidationError):
    default_error_code = "EMPTY_CONTENT"


class InvalidPageError(ValidationError):
    default_error_code = "INVALID_PAGE"


class SameUserError(ValidationError):
    default_error_code = "SAME_USER"


class NotChatCreatorError(PermissionDeniedError):
    """Requester is not the group creator (or not a member of a direct chat)."""

    default_error_code = "NOT_CHAT_CREATOR"


class NotChatMemberError(PermissionDeniedError):
    default_error_code = "NOT_CHAT_MEMBER"


class ChatNotFoundError(NotFoundError):
    default_error_code = "CHAT_NOT_FOUND"

    def __init__(self, message: str = "Chat not found", **kwargs):
        super().__init__(message, **kwargs)


class UserNotFoundError(NotFoundError):
    default_error_code = "USER_NOT_FOUND"

    def __init__(self, message: str = "User not found", **kwargs):
        super().__init__(message, **kwargs)


class ContentTooLongError(ValidationError):
    default_error_code = "CONTENT_TOO_LONG"
