"""Per-conversation context handed to every flow handler."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date
from typing import NamedTuple, TypeVar

from scheduling_agent.config import MAX_SLOT_OPTIONS
from scheduling_agent.conversation.state import AwaitingRemoteReply, ConversationState
from scheduling_agent.services.scheduling_client import SchedulingClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Transition(NamedTuple):
    """What a handler produces for one turn: the next state and the reply."""

    state: ConversationState
    reply: str


def _ignore_pending(state: ConversationState) -> None:
    pass


@dataclass
class FlowContext:
    """Everything a flow handler may touch besides the state and the text.

    ``publish_pending`` is how a handler tells its owner that it is about to
    suspend on the backend; the engine uses it to switch into the matching
    :class:`AwaitingRemoteReply` state for the duration of the call.
    """

    client: SchedulingClient
    today: Callable[[], date] = date.today
    max_slot_options: int = MAX_SLOT_OPTIONS
    publish_pending: Callable[[ConversationState], None] = field(default=_ignore_pending)

    async def call_remote(self, pending: AwaitingRemoteReply, call: Awaitable[T]) -> T:
        """Enter *pending*, then await the backend *call*."""
        self.publish_pending(pending)
        logger.debug("Awaiting scheduling backend (%s)", pending.operation)
        return await call
