"""
Agent Spawn Requests
====================
The payload handed to the external agent/bot subsystem when the user asks
for an "AI expert" built from a main branch. The core only emits it and
never waits for the outcome.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from mindcanvas.model.graph import MindMapGraph, NodeLevel

PERSONA_TEMPLATE = """You are an AI expert specialized in "{topic}". Your role is to provide detailed, practical, and actionable advice about this topic. You have deep knowledge about:

{expertise}

When users ask questions, provide comprehensive answers that are:
- Practical and actionable
- Based on current best practices
- Tailored to different skill levels
- Include specific examples when helpful

Your personality is helpful, knowledgeable, and encouraging. You break down complex concepts into understandable steps."""


@dataclass(frozen=True)
class AgentSpawnRequest:
    node_text: str
    child_texts: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def persona_name(self) -> str:
        return f"{self.node_text} Expert"

    def system_prompt(self) -> str:
        expertise = "\n".join(f"- {text}" for text in self.child_texts)
        return PERSONA_TEMPLATE.format(topic=self.node_text, expertise=expertise)

    def summary(self) -> str:
        if not self.child_texts:
            return f"Expert for {self.node_text}"
        return f"Expert for {self.node_text} with expertise in: {', '.join(self.child_texts)}"


# Supplied by the surrounding application
AgentSink = Callable[[AgentSpawnRequest], None]


def request_for_node(graph: MindMapGraph, node_id: str) -> Optional[AgentSpawnRequest]:
    """Build the request for a main branch; None for anything else."""
    node = graph.get(node_id)
    if node is None or node.level != NodeLevel.MAIN:
        return None
    return AgentSpawnRequest(
        node_text=node.text,
        child_texts=tuple(child.text for child in graph.children_of(node_id)),
    )
