"""Daily digest: one Claude call that turns the last day of notes into a brief."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from anthropic import Anthropic

from voicebrief.config import settings
from voicebrief.errors import MalformedResponse, translate_error
from voicebrief.extraction.models import ExtractionResult
from voicebrief.intelligence.models import DailyWarning, Note, Priority

TOOL_NAME = "store_daily_brief"

MAX_RECENT_NOTES = 15
MAX_ITEMS_PER_SECTION = 5
NOTE_PREVIEW_CHARS = 100

WARNING_TYPES = {"stalled", "overdue", "commitment"}

DIGEST_TOOL: dict[str, Any] = {
    "name": TOOL_NAME,
    "description": "Store the daily brief. Call this once.",
    "input_schema": {
        "type": "object",
        "properties": {
            "summary": {
                "type": "string",
                "description": "1-3 sentences on what matters today.",
            },
            "highlights": {
                "type": "array",
                "description": "3-5 key things to know today.",
                "items": {"type": "string"},
            },
            "priorities": {
                "type": "array",
                "description": "3-5 actionable items, most important first.",
                "items": {
                    "type": "object",
                    "properties": {
                        "content": {"type": "string", "description": "What to focus on."},
                        "reason": {"type": "string", "description": "Why it matters."},
                        "project": {"type": "string", "description": "Project name, if any."},
                    },
                    "required": ["content"],
                },
            },
            "warnings": {
                "type": "array",
                "description": "0-3 items that need attention. Be honest about problems.",
                "items": {
                    "type": "object",
                    "properties": {
                        "type": {"type": "string", "enum": sorted(WARNING_TYPES)},
                        "content": {"type": "string"},
                        "days_since_issue": {"type": "integer"},
                    },
                    "required": ["type", "content"],
                },
            },
        },
        "required": ["summary", "highlights", "priorities", "warnings"],
    },
}

SYSTEM_PROMPT = (
    "You are generating a daily brief for a founder's voice notes. "
    "Be direct, actionable, and founder-friendly. Focus on what matters TODAY.\n\n"
    f"Use the {TOOL_NAME} tool to return the brief."
)


@dataclass
class DigestPayload:
    summary: str
    highlights: list[str] = field(default_factory=list)
    priorities: list[Priority] = field(default_factory=list)
    warnings: list[DailyWarning] = field(default_factory=list)


def build_brief_context(
    notes: list[Note], extractions: list[ExtractionResult], now: datetime
) -> str:
    """Render recent notes and open items as the plain-text context for the digest call."""
    lines: list[str] = []

    recent = sorted(notes, key=lambda n: n.created_at, reverse=True)[:MAX_RECENT_NOTES]
    if recent:
        lines.append("RECENT NOTES:")
        for note in recent:
            preview = (note.transcript or "")[:NOTE_PREVIEW_CHARS].replace("\n", " ")
            lines.append(f"- {note.display_title}: {preview}")
        lines.append("")

    def section(title: str, entries: list[str]) -> None:
        if not entries:
            return
        lines.append(f"{title} ({len(entries)}):")
        lines.extend(f"- {e}" for e in entries[:MAX_ITEMS_PER_SECTION])
        lines.append("")

    section("DECISIONS", [d.content for r in extractions for d in r.decisions])
    section(
        "OPEN ACTIONS",
        [
            f"{a.content} (owner: {a.owner or 'me'}, due: {a.due or 'TBD'})"
            for r in extractions
            for a in r.actions
            if not a.completed
        ],
    )
    section(
        "OPEN COMMITMENTS",
        [
            f"{c.owner or 'me'}: {c.content} ({(now - r.created_at).days}d old)"
            for r in extractions
            for c in r.commitments
            if not c.completed
        ],
    )
    section(
        "UNRESOLVED",
        [f"{u.content} ({u.detail})" if u.detail else u.content for r in extractions for u in r.unresolved],
    )

    if not lines:
        return "No notes were recorded in the last day."
    return "\n".join(lines).rstrip()


def generate_daily_digest(context: str) -> DigestPayload:
    """Generate the daily brief from ``context`` with a single Claude call.

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
            max_tokens=1024,
            system=SYSTEM_PROMPT,
            tools=[DIGEST_TOOL],
            tool_choice={"type": "tool", "name": TOOL_NAME},
            messages=[{"role": "user", "content": f"Here's what's happening:\n\n{context}"}],
        )
        return _parse_digest_response(response)
    except Exception as exc:
        raise translate_error(exc) from exc


def _parse_digest_response(response: Any) -> DigestPayload:
    for block in response.content:
        if block.type != "tool_use" or block.name != TOOL_NAME:
            continue

        data = block.input
        if isinstance(data, str):
            data = json.loads(data)
        if not isinstance(data, dict) or not isinstance(data.get("summary"), str):
            raise MalformedResponse("Daily brief is missing a summary")

        warnings = []
        for w in data.get("warnings") or []:
            kind = str(w.get("type", "")).lower()
            warnings.append(
                DailyWarning(
                    type=kind if kind in WARNING_TYPES else "stalled",
                    content=w["content"],
                    days_since_issue=int(w.get("days_since_issue") or 0),
                )
            )

        return DigestPayload(
            summary=data["summary"],
            highlights=[str(h) for h in data.get("highlights") or []],
            priorities=[
                Priority(content=p["content"], reason=p.get("reason") or "", project=p.get("project"))
                for p in data.get("priorities") or []
            ],
            warnings=warnings,
        )

    raise MalformedResponse(f"Response has no {TOOL_NAME} tool_use block")
