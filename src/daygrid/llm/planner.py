from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from openai import OpenAI
from pydantic import ValidationError

from ..config.settings import LlmSettings
from ..core.time_math import offset_string
from ..domain import Event, TimedEvent
from .models import CommandPlan
from .prompts import IMAGE_DEFAULT_REQUEST, SYSTEM_PROMPT_TEMPLATE

logger = logging.getLogger(__name__)

CONTEXT_EVENT_LIMIT = 100


class CommandPlannerError(RuntimeError):
    """Raised when a command cannot be turned into a structured plan."""


@dataclass(frozen=True)
class CommandImage:
    """An image sent along with a command, such as a screenshot of a syllabus."""

    data: bytes
    mime_type: str = "image/png"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "CommandImage":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type or not mime_type.startswith("image/"):
            raise ValueError(f"{path.name} is not an image")
        return cls(data=path.read_bytes(), mime_type=mime_type)

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"


def user_message(text: str, image: Optional[CommandImage] = None) -> Dict[str, Any]:
    if image is None:
        return {"role": "user", "content": text}
    return {
        "role": "user",
        "content": [
            {"type": "text", "text": text or IMAGE_DEFAULT_REQUEST},
            {"type": "image_url", "image_url": {"url": image.data_url()}},
        ],
    }


def _sort_key(event: Event, tz: tzinfo) -> datetime:
    if isinstance(event, TimedEvent):
        return event.start if event.start.tzinfo else event.start.replace(tzinfo=tz)
    return datetime.combine(event.start, time(), tzinfo=tz)


def relevant_events(events: Iterable[Event], today: date, tz: tzinfo, limit: int = CONTEXT_EVENT_LIMIT) -> List[Event]:
    """Events from the start of ``today`` onwards, earliest first."""

    floor = datetime.combine(today, time(), tzinfo=tz)
    upcoming = [event for event in events if _sort_key(event, tz) >= floor]
    return sorted(upcoming, key=lambda event: _sort_key(event, tz))[:limit]


def events_context(events: Iterable[Event]) -> str:
    lines = [
        " | ".join(
            (
                event.id,
                event.calendar_id,
                event.summary,
                event.start.isoformat(),
                event.end.isoformat(),
                (event.description or "").replace("\n", " ")[:200],
            )
        )
        for event in events
    ]
    return "\n".join(lines) if lines else "(none)"


class CommandPlanner:
    """Turns a free-text command into a ``CommandPlan`` through an OpenAI chat completion."""

    def __init__(self, settings: LlmSettings, *, tz: tzinfo, client: Optional[OpenAI] = None) -> None:
        self.settings = settings
        self.tz = tz
        self._client = client

    def _ensure_client(self) -> OpenAI:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            missing = ", ".join(self.settings.missing_env_vars)
            raise CommandPlannerError(f"The language model is not configured. Missing: {missing}")
        self._client = OpenAI(
            api_key=self.settings.api_key,
            base_url=self.settings.base_url,
            organization=self.settings.organization,
        )
        return self._client

    def system_prompt(self, existing_events: Iterable[Event], today: date) -> str:
        context = events_context(relevant_events(existing_events, today, self.tz))
        return SYSTEM_PROMPT_TEMPLATE.format(
            today=today.isoformat(),
            tz=offset_string(self.tz),
            events_context=context,
        )

    def plan(
        self,
        text: str,
        existing_events: Iterable[Event],
        history: List[Dict[str, str]],
        *,
        today: Optional[date] = None,
        image: Optional[CommandImage] = None,
    ) -> CommandPlan:
        client = self._ensure_client()
        prompt = self.system_prompt(existing_events, today or datetime.now(self.tz).date())
        try:
            completion = client.chat.completions.create(
                model=self.settings.model,
                temperature=0.2,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": prompt},
                    *history,
                    user_message(text, image),
                ],
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Language model request failed")
            raise CommandPlannerError(f"Language model request failed: {exc}") from exc
        content = completion.choices[0].message.content or ""
        return self.parse_choice(content)

    def parse_choice(self, content: str) -> CommandPlan:
        try:
            return CommandPlan.model_validate_json(content)
        except ValidationError as exc:
            logger.warning("Unusable plan from language model: %s", content[:200])
            raise CommandPlannerError("The assistant reply could not be understood.") from exc
