"""
Page arithmetic for the message feed.

The feed is page-numbered (page=1 is the newest messages) with a fixed
page size. Each page is fetched newest-first and then reversed, so the
messages inside a page read oldest to newest.

    MessagePage: One page of messages plus the total page count
    page_bounds: Slice bounds for a 1-based page number
    count_pages: Number of pages needed for `total` messages
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chat.constants import MESSAGE_CONFIG

if TYPE_CHECKING:
    from chat.models import Message


@dataclass
class MessagePage:
    """
    One page of the message feed.

    Attributes:
        messages: Messages on this page, oldest first
        page: 1-based page number
        total_pages: ceil(total messages / page size), 0 for an empty chat
    """

    messages: list[Message] = field(default_factory=list)
    page: int = 1
    total_pages: int = 0


def page_bounds(page: int, page_size: int = MESSAGE_CONFIG.PAGE_SIZE) -> tuple[int, int]:
    """Return (start, stop) slice bounds for a 1-based page."""
    start = (page - 1) * page_size
    return start, start + page_size


def count_pages(total: int, page_size: int = MESSAGE_CONFIG.PAGE_SIZE) -> int:
    return math.ceil(total / page_size) if total else 0
