"""Scheduling Assistant — a rule-based conversational agent that books,
reschedules and cancels medical appointments.

Architecture Overview
=====================

Each user turn passes through a small **LangGraph** state machine:

1. **router** — if no flow is active, classifies the turn into one of three
   intents (book / reschedule / cancel) by keyword and opens that flow.

2. **book / reschedule / cancel** — the flow handler for the active intent
   fills exactly one field per turn, using pure slot extractors (appointment
   type, date, time, slot pick) and, at fixed points, the remote scheduling
   client.

Routing: router → (new reschedule/cancel?) → END
         router → flow node → END

Key Design Decisions
--------------------
- **Tagged states**: the conversation state is a family of frozen pydantic
  variants keyed by ``step``; each carries only the fields valid at that
  point, so a half-filled booking can never reach the confirm call.
- **Busy gating**: while a backend call is in flight the state is an
  ``AwaitingRemoteReply`` variant and new turns are refused.
- **Failure policy**: a failed booking sends the user back to pick a date
  (keeping the type); a failed reschedule or cancel abandons the flow.
- **Backends**: ``HttpSchedulingClient`` (httpx) talks to the REST backend;
  ``InMemorySchedulingClient`` runs the same mock backend in-process.

Package Structure
-----------------
- ``scheduling_agent/config.py`` — Centralized configuration from environment variables
- ``scheduling_agent/models.py`` — Intent, appointment catalog, slots, backend results
- ``scheduling_agent/nlu/`` — Intent classifier and slot extractors
- ``scheduling_agent/conversation/`` — State variants, flows, turn graph, engine
- ``scheduling_agent/services/`` — Scheduling clients and metrics
- ``scheduling_agent/backend/`` — Mock scheduling backend rules
- ``scheduling_agent/api/`` — FastAPI routes and Pydantic schemas
- ``scheduling_agent/server.py`` — FastAPI application (mock backend)
- ``scheduling_agent/main.py`` — CLI chat interface
"""
