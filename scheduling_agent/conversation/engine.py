"""Conversation engine: one conversation, one state, one turn at a time.

The engine owns the :class:`ConversationState` between turns and feeds each
accepted turn through the LangGraph turn graph.  While a flow handler is
suspended on the scheduling backend the state is an
:class:`AwaitingRemoteReply` variant, and any turn that arrives in the
meantime is rejected without touching the state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from scheduling_agent.config import MAX_SLOT_OPTIONS
from scheduling_agent.conversation import messages
from scheduling_agent.conversation.context import FlowContext
from scheduling_agent.conversation.graph import create_turn_graph
from scheduling_agent.conversation.state import (
    AwaitingIntent,
    AwaitingRemoteReply,
    ConversationState,
)
from scheduling_agent.errors import StateConsistencyError
from scheduling_agent.services.scheduling_client import SchedulingClient, get_scheduling_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """The agent's answer to one user turn.

    ``accepted`` is ``False`` when the turn was refused (blank, or sent while
    a backend call was still outstanding); the state is unchanged then.
    """

    reply: str
    state: ConversationState
    accepted: bool = True


class Conversation:
    """A single booking / rescheduling / cancelling conversation."""

    greeting = messages.GREETING

    def __init__(
        self,
        client: SchedulingClient | None = None,
        *,
        today: Callable[[], date] | None = None,
        max_slot_options: int = MAX_SLOT_OPTIONS,
    ):
        self._state: ConversationState = AwaitingIntent()
        self._context = FlowContext(
            client=client or get_scheduling_client(),
            today=today or date.today,
            max_slot_options=max_slot_options,
            publish_pending=self._enter_pending,
        )
        self._graph = create_turn_graph(self._context)

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def busy(self) -> bool:
        """True while a scheduling backend call is outstanding."""
        return isinstance(self._state, AwaitingRemoteReply)

    def reset(self) -> None:
        """Abandon whatever flow is active and wait for a new intent."""
        logger.debug("Conversation reset from %s", self._state.step)
        self._state = AwaitingIntent()

    def _enter_pending(self, pending: ConversationState) -> None:
        self._state = pending

    async def handle_turn(self, text: str) -> TurnResult:
        """Process one user turn and return the agent's reply."""
        if self.busy:
            logger.warning("Turn rejected: still awaiting %s", self._state.operation)
            return TurnResult(messages.BUSY, self._state, accepted=False)

        text = text.strip()
        if not text:
            return TurnResult(messages.EMPTY_TURN, self._state, accepted=False)

        before = self._state
        try:
            result = await self._graph.ainvoke(
                {"conversation": before, "text": text, "intent": None, "reply": None},
            )
        except StateConsistencyError as exc:
            logger.error("Resetting conversation after inconsistent state: %s", exc)
            self._state = AwaitingIntent()
            return TurnResult(messages.RESTART_AFTER_INCONSISTENCY, self._state)
        except BaseException:
            # Never leave the engine parked in a pending state.
            self._state = before
            raise

        self._state = result["conversation"]
        logger.debug("Turn handled: %s -> %s", before.step, self._state.step)
        return TurnResult(result["reply"], self._state)
