"""
Context assembly for answer generation.

Builds numbered source blocks from the ranked candidates, renders the
recent conversation window, and pairs them with the mode-specific
system prompt.  Pure functions.
"""

from __future__ import annotations

from techassist.prompts.system_prompts import (
    STANDARD_CLOSING,
    USER_PROMPT_TEMPLATE,
    VOICE_CLOSING,
    select_system_prompt,
)
from techassist.schemas.request import ConversationMessage
from techassist.schemas.retrieval import Candidate

SOURCE_SEPARATOR = "\n\n---\n\n"
NO_CONTEXT_TEXT = "No relevant context found."

_ROLE_LABELS = {
    "user": "Technician",
    "assistant": "Assistant",
}


def build_context_blocks(candidates: list[Candidate]) -> str:
    """One ``[Source N: file | Chunk i]`` block per candidate, in rank order."""
    if not candidates:
        return NO_CONTEXT_TEXT
    return SOURCE_SEPARATOR.join(
        f"[Source {idx}: {c.filename or 'Unknown'} | Chunk {c.chunk_index}]\n{c.text}"
        for idx, c in enumerate(candidates, start=1)
    )


def build_conversation_context(
    history: list[ConversationMessage] | None,
    window: int = 8,
) -> str:
    """Role-labelled transcript of the most recent ``window`` messages."""
    if not history or window <= 0:
        return ""
    recent = history[-window:]
    lines = [f"{_ROLE_LABELS[m.role]}: {m.content}" for m in recent]
    return "\nRecent conversation:\n" + "\n".join(lines) + "\n"


def build_prompts(
    question: str,
    candidates: list[Candidate],
    history: list[ConversationMessage] | None,
    is_conversation_mode: bool,
    history_window: int = 8,
) -> tuple[str, str]:
    """Return ``(system_prompt, user_prompt)`` for the generation backend."""
    system_prompt = select_system_prompt(is_conversation_mode)
    user_prompt = USER_PROMPT_TEMPLATE.format(
        question=question,
        conversation_context=build_conversation_context(history, history_window),
        context=build_context_blocks(candidates),
        closing_instruction=VOICE_CLOSING if is_conversation_mode else STANDARD_CLOSING,
    )
    return system_prompt, user_prompt
