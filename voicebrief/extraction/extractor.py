"""Claude-powered structured extraction of decisions, actions, commitments, and open questions."""

from __future__ import annotations

import json
from typing import Any

from anthropic import Anthropic

from voicebrief.config import settings
from voicebrief.errors import MalformedResponse, translate_error
from voicebrief.extraction.models import ExtractedItem, ItemType

TOOL_NAME = "store_note_insights"

# Transcripts longer than this are sampled rather than sent whole
SAMPLE_THRESHOLD = 8000
SAMPLE_WINDOW = 2000


def _item_schema(description: str, extra: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "array",
        "description": description,
        "items": {
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "The item, in one sentence."},
                **extra,
            },
            "required": ["content"],
        },
    }


# Tool definition for Claude structured output
EXTRACTION_TOOL: dict[str, Any] = {
    "name": TOOL_NAME,
    "description": (
        "Store structured insights extracted from a voice note transcript. "
        "Call this once with all decisions, actions, commitments, and unresolved items."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "decisions": _item_schema(
                "Things that were decided or changed.",
                {"detail": {"type": "string", "description": "What the decision affects."}},
            ),
            "actions": _item_schema(
                "Tasks that must happen next.",
                {
                    "owner": {"type": "string", "description": "Who owns it (default: me)."},
                    "due": {"type": "string", "description": "By when (free-form, or 'TBD')."},
                    "detail": {
                        "type": "string",
                        "description": "Priority: Urgent, High, Normal, or Low.",
                    },
                },
            ),
            "commitments": _item_schema(
                "Promises made by the speaker or by someone else.",
                {
                    "owner": {"type": "string", "description": "Who made the promise."},
                    "due": {"type": "string", "description": "When it is due, if stated."},
                },
            ),
            "unresolved": _item_schema(
                "Open questions or items that block execution.",
                {
                    "detail": {
                        "type": "string",
                        "description": "Why it is unresolved (no decision, no owner, ambiguous).",
                    }
                },
            ),
        },
        "required": ["decisions", "actions", "commitments", "unresolved"],
    },
}

SYSTEM_PROMPT = (
    "You are a chief of staff for a busy founder. Your job is not to summarize "
    "the note; it is to reduce cognitive load and enforce follow-through.\n\n"
    "The speaker talks casually and imprecisely. Infer intent and fill gaps.\n\n"
    "Extract:\n"
    "1. **Decisions**: what was agreed or changed.\n"
    "2. **Actions**: what must happen next, who owns it, and by when.\n"
    "3. **Commitments**: promises the speaker or others made.\n"
    "4. **Unresolved**: risks, ambiguity, or missing information that blocks execution.\n\n"
    f"Use the {TOOL_NAME} tool to return your results. Only extract items "
    "clearly supported by the transcript."
)

_SECTIONS: tuple[tuple[str, ItemType], ...] = (
    ("decisions", ItemType.DECISION),
    ("actions", ItemType.ACTION),
    ("commitments", ItemType.COMMITMENT),
    ("unresolved", ItemType.UNRESOLVED),
)


def sample_transcript(text: str) -> str:
    """Shorten a long transcript to five evenly spread windows.

    Short transcripts are returned unchanged.
    """
    if len(text) <= SAMPLE_THRESHOLD:
        return text

    half = SAMPLE_WINDOW // 2
    n = len(text)
    windows = [text[:SAMPLE_WINDOW]]
    for centre in (n // 4, n // 2, 3 * n // 4):
        windows.append(text[centre - half : centre + half])
    windows.append(text[-SAMPLE_WINDOW:])
    return "\n...\n".join(windows)


def extract_from_transcript(transcript: str) -> list[ExtractedItem]:
    """Extract decisions, actions, commitments, and unresolved items using Claude.

    Args:
        transcript: The note transcript.

    Returns:
        A list of ExtractedItem instances.

    Raises:
        IntelligenceError: on transport, upstream, or parsing failure.
    """
    client = Anthropic(
        api_key=settings.anthropic_api_key,
        timeout=settings.request_timeout_seconds,
        max_retries=0,
    )

    try:
        response = client.messages.create(
            model=settings.llm_model,
            max_tokens=2048,
            system=SYSTEM_PROMPT,
            tools=[EXTRACTION_TOOL],
            tool_choice={"type": "tool", "name": TOOL_NAME},
            messages=[
                {
                    "role": "user",
                    "content": (
                        "Extract decisions, actions, commitments, and unresolved items "
                        f"from this voice note:\n\n{sample_transcript(transcript)}"
                    ),
                }
            ],
        )
        return _parse_tool_response(response)
    except Exception as exc:
        raise translate_error(exc) from exc


def _parse_tool_response(response: Any) -> list[ExtractedItem]:
    """Parse the Claude tool_use response into an ExtractedItem list."""
    for block in response.content:
        if block.type != "tool_use" or block.name != TOOL_NAME:
            continue

        data = block.input
        if isinstance(data, str):
            data = json.loads(data)
        if not isinstance(data, dict):
            raise MalformedResponse(f"Tool input is {type(data).__name__}, expected object")

        items: list[ExtractedItem] = []
        for key, item_type in _SECTIONS:
            for raw in data.get(key) or []:
                items.append(
                    ExtractedItem(
                        item_type=item_type,
                        content=raw["content"],
                        owner=raw.get("owner"),
                        due=raw.get("due"),
                        detail=raw.get("detail"),
                    )
                )
        return items

    raise MalformedResponse(f"Response has no {TOOL_NAME} tool_use block")
