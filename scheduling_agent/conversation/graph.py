"""LangGraph turn graph: routes one user turn to the right flow handler.

  Nodes:
    1. **router**      classifies the intent when no flow is active (or the
                       last one finished) and opens the matching flow
    2. **book**        runs one step of the booking flow
    3. **reschedule**  runs one step of the reschedule flow
    4. **cancel**      runs one step of the cancel flow

  Routing:
    router → (new reschedule/cancel flow?) → END   (the opening prompt is the reply)
    router → (intent of the active flow)   → book | reschedule | cancel → END

  A new booking flow is not answered by the router: the same turn goes on to
  the booking node so "book a physical exam" resolves the appointment type
  immediately.

The graph is compiled once per conversation without a checkpointer; the
``Conversation`` engine owns the state between turns.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from langgraph.graph import END, StateGraph
from typing_extensions import TypedDict

from scheduling_agent.conversation import messages
from scheduling_agent.conversation.context import FlowContext, Transition
from scheduling_agent.conversation.flows.booking import handle_booking_turn
from scheduling_agent.conversation.flows.cancel import handle_cancel_turn
from scheduling_agent.conversation.flows.reschedule import handle_reschedule_turn
from scheduling_agent.conversation.state import (
    BookingAwaitingType,
    CancelAwaitingBookingId,
    ConversationState,
    RescheduleAwaitingBookingId,
    starts_new_flow,
)
from scheduling_agent.models import Intent
from scheduling_agent.nlu.intent import classify_intent

logger = logging.getLogger(__name__)

FlowHandler = Callable[[ConversationState, str, FlowContext], Awaitable[Transition]]


class TurnState(TypedDict):
    """Values flowing through the graph for a single turn.

    ``conversation`` goes in as the state before the turn and comes out as
    the state after it.  ``intent`` is routing plumbing set by the router.
    """

    conversation: ConversationState
    text: str
    intent: Intent | None
    reply: str | None


# First state of each flow, and the prompt the router answers with
# (``None`` means the flow node handles the opening turn itself).
_FLOW_ENTRY: dict[Intent, tuple[type[ConversationState], str | None]] = {
    Intent.BOOK: (BookingAwaitingType, None),
    Intent.RESCHEDULE: (RescheduleAwaitingBookingId, messages.START_RESCHEDULE),
    Intent.CANCEL: (CancelAwaitingBookingId, messages.START_CANCEL),
}

_FLOW_HANDLERS: dict[Intent, FlowHandler] = {
    Intent.BOOK: handle_booking_turn,
    Intent.RESCHEDULE: handle_reschedule_turn,
    Intent.CANCEL: handle_cancel_turn,
}


# ── Nodes ────────────────────────────────────────────────────────────


def router_node(state: TurnState) -> dict:
    """Open a new flow when none is active; otherwise keep the current one."""
    current = state["conversation"]
    if not starts_new_flow(current):
        return {"intent": current.intent}

    intent = classify_intent(state["text"])
    entry_cls, prompt = _FLOW_ENTRY[intent]
    logger.debug("Router: new %s flow (from %s)", intent.value, current.step)
    return {"conversation": entry_cls(), "intent": intent, "reply": prompt}


def _make_flow_node(handler: FlowHandler, ctx: FlowContext):
    """Wrap a flow handler as a graph node bound to one conversation context."""

    async def flow_node(state: TurnState) -> dict:
        transition = await handler(state["conversation"], state["text"], ctx)
        return {"conversation": transition.state, "reply": transition.reply}

    return flow_node


# ── Conditional edges ────────────────────────────────────────────────


def route_by_intent(state: TurnState) -> str:
    """Stop if the router already answered, else go to the active flow's node."""
    if state.get("reply"):
        return END
    return state["intent"].value


# ── Graph assembly ───────────────────────────────────────────────────


def create_turn_graph(ctx: FlowContext):
    """Build and compile the per-turn dispatch graph for one conversation.

    Returns a compiled graph that can be invoked with:
        await graph.ainvoke(
            {"conversation": state, "text": "...", "intent": None, "reply": None},
        )
    """
    graph = StateGraph(TurnState)

    graph.add_node("router", router_node)
    for intent, handler in _FLOW_HANDLERS.items():
        graph.add_node(intent.value, _make_flow_node(handler, ctx))
        graph.add_edge(intent.value, END)

    graph.set_entry_point("router")
    graph.add_conditional_edges(
        "router",
        route_by_intent,
        {**{intent.value: intent.value for intent in Intent}, END: END},
    )

    return graph.compile()
