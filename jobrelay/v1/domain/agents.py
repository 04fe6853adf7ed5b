"""
Custom AI agent collaboration.

The real agents are external services. ``StubAgentCollaboration`` keeps the
routing rules and roster so the job pipeline runs end-to-end without them.
"""

from typing import Any, Protocol

from pydantic import BaseModel, Field

from jobrelay.config.logging import get_logger

logger = get_logger(__name__)


class AgentReply(BaseModel):
    agent_id: str
    agent_name: str
    response: str
    collaborators: list[str] = Field(default_factory=list)


class AgentCollaboration(Protocol):
    """Protocol for the multi-agent collaboration backend."""

    async def respond(
        self,
        user_id: str,
        message: str,
        preferred_agent: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> AgentReply:
        """Route a message to the best (or preferred) agent and return its reply."""
        ...


AGENT_ROSTER: dict[str, str] = {
    "roxy": "Roxy",
    "blaze": "Blaze",
    "echo": "Echo",
    "lumi": "Lumi",
    "vex": "Vex",
    "lexi": "Lexi",
    "nova": "Nova",
    "glitch": "Glitch",
}

# First matching rule wins; roxy handles everything else
ROUTING_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("roxy", ("decision", "strategy", "plan")),
    ("blaze", ("growth", "sales", "revenue")),
    ("echo", ("marketing", "content", "brand")),
    ("lumi", ("legal", "compliance", "policy")),
    ("vex", ("technical", "system", "code")),
    ("lexi", ("data", "analysis", "metrics")),
    ("nova", ("design", "ui", "ux")),
    ("glitch", ("problem", "bug", "issue")),
]
DEFAULT_AGENT = "roxy"


def determine_primary_agent(message: str) -> str:
    """Pick the agent whose keywords appear in the message."""
    lowered = message.lower()
    for agent_id, keywords in ROUTING_RULES:
        if any(keyword in lowered for keyword in keywords):
            return agent_id
    return DEFAULT_AGENT


class StubAgentCollaboration:
    """Deterministic in-process stand-in for the agent backend."""

    async def respond(
        self,
        user_id: str,
        message: str,
        preferred_agent: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> AgentReply:
        agent_id = preferred_agent or determine_primary_agent(message)
        if agent_id not in AGENT_ROSTER:
            raise LookupError(f"Agent {agent_id} not found")

        # Other agents whose keywords also match are pulled in as collaborators
        lowered = message.lower()
        collaborators = [
            other
            for other, keywords in ROUTING_RULES
            if other != agent_id and any(keyword in lowered for keyword in keywords)
        ]

        logger.info(
            "Agent request routed",
            user_id=user_id,
            agent_id=agent_id,
            collaborators=collaborators,
        )

        name = AGENT_ROSTER[agent_id]
        return AgentReply(
            agent_id=agent_id,
            agent_name=name,
            response=f"{name} received your request: {message}",
            collaborators=collaborators,
        )
