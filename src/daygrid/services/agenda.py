from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

import orjson

from ..core import PreferenceStore
from ..core.colors import type_tag
from ..domain import Event, TimedEvent

logger = logging.getLogger(__name__)

TYPES_KEY = "daygrid_agenda_types"
DONE_KEY = "daygrid_agenda_done"
TASKS_KEY = "daygrid_custom_tasks"

DEFAULT_TYPES = ("homework", "lab", "quiz", "exam", "project", "assignment")
PRESET_TYPES = DEFAULT_TYPES + ("coffee", "meeting")
AGENDA_HORIZON = timedelta(days=14)


@dataclass(frozen=True, slots=True)
class CustomTask:
    """A free-text to-do that lives only in the agenda, never in the event store."""

    id: str
    summary: str
    due: datetime
    item_type: str

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "summary": self.summary, "dueDate": self.due.isoformat(), "type": self.item_type}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CustomTask":
        return cls(
            id=str(record["id"]),
            summary=str(record["summary"]),
            due=datetime.fromisoformat(str(record["dueDate"])),
            item_type=str(record.get("type") or "homework"),
        )


@dataclass(frozen=True, slots=True)
class AgendaItem:
    item_type: Optional[str]
    done: bool
    event: Optional[Event] = None
    task: Optional[CustomTask] = None

    @property
    def item_id(self) -> str:
        return self.task.id if self.task is not None else self.event.id

    @property
    def summary(self) -> str:
        return self.task.summary if self.task is not None else self.event.summary

    @property
    def is_task(self) -> bool:
        return self.task is not None

    @property
    def has_time(self) -> bool:
        return self.task is not None or isinstance(self.event, TimedEvent)


def _event_start(event: Event, tz) -> datetime:
    if isinstance(event, TimedEvent):
        return event.start
    return datetime.combine(event.start, time(), tzinfo=tz)


def _item_start(item: AgendaItem, tz) -> datetime:
    if item.task is not None:
        return item.task.due
    return _event_start(item.event, tz)


@dataclass(slots=True)
class AgendaService:
    """Upcoming tagged items (homework, exams, ...) with persisted filters, tasks and done marks."""

    preferences: PreferenceStore

    def _load_list(self, key: str, default: Iterable[Any]) -> List[Any]:
        raw = self.preferences.get(key)
        if not raw:
            return list(default)
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning("Preference %s is corrupt, using defaults", key)
            return list(default)
        if not isinstance(payload, list):
            return list(default)
        return payload

    def _save_list(self, key: str, values: Iterable[Any]) -> None:
        self.preferences.set(key, orjson.dumps(list(values)).decode("utf-8"))

    # ------------------------------------------------------------------ types

    def enabled_types(self) -> List[str]:
        return [str(item) for item in self._load_list(TYPES_KEY, DEFAULT_TYPES)]

    def toggle_type(self, item_type: str) -> List[str]:
        types = self.enabled_types()
        if item_type in types:
            types.remove(item_type)
        else:
            types.append(item_type)
        self._save_list(TYPES_KEY, types)
        return types

    def add_type(self, item_type: str) -> List[str]:
        cleaned = item_type.strip().lower()
        types = self.enabled_types()
        if cleaned and cleaned not in types:
            types.append(cleaned)
            self._save_list(TYPES_KEY, types)
        return types

    def remove_type(self, item_type: str) -> List[str]:
        types = [existing for existing in self.enabled_types() if existing != item_type]
        self._save_list(TYPES_KEY, types)
        return types

    def custom_types(self) -> List[str]:
        return [item_type for item_type in self.enabled_types() if item_type not in PRESET_TYPES]

    # ------------------------------------------------------------------ done marks

    def done_items(self) -> List[str]:
        return [str(item) for item in self._load_list(DONE_KEY, ())]

    def toggle_done(self, item_id: str) -> bool:
        done = self.done_items()
        if item_id in done:
            done.remove(item_id)
            now_done = False
        else:
            done.append(item_id)
            now_done = True
        self._save_list(DONE_KEY, done)
        return now_done

    # ------------------------------------------------------------------ tasks

    def custom_tasks(self) -> List[CustomTask]:
        tasks: List[CustomTask] = []
        for record in self._load_list(TASKS_KEY, ()):
            try:
                tasks.append(CustomTask.from_record(record))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed agenda task: %r", record)
        return tasks

    def add_task(self, summary: str, due: datetime, item_type: str) -> Optional[CustomTask]:
        cleaned = summary.strip()
        if not cleaned:
            return None
        task = CustomTask(id=f"task_{uuid4().hex[:12]}", summary=cleaned, due=due, item_type=item_type)
        self._save_list(TASKS_KEY, [existing.to_record() for existing in self.custom_tasks()] + [task.to_record()])
        logger.info("Added agenda task %s", task.id)
        return task

    def delete_task(self, task_id: str) -> bool:
        tasks = self.custom_tasks()
        remaining = [task for task in tasks if task.id != task_id]
        if len(remaining) == len(tasks):
            return False
        self._save_list(TASKS_KEY, [task.to_record() for task in remaining])
        done = self.done_items()
        if task_id in done:
            done.remove(task_id)
            self._save_list(DONE_KEY, done)
        return True

    # ------------------------------------------------------------------ listing

    def upcoming(self, events: Iterable[Event], now: datetime) -> List[AgendaItem]:
        types = self.enabled_types()
        done = set(self.done_items())
        horizon = now + AGENDA_HORIZON
        items: List[AgendaItem] = []
        for event in events:
            start = _event_start(event, now.tzinfo)
            if start < now or start > horizon:
                continue
            tag = type_tag(event.description)
            if tag and tag in types:
                matched: Optional[str] = tag
            else:
                title = event.summary.lower()
                matched = next((item_type for item_type in types if item_type in title), None)
            if matched is None:
                continue
            items.append(AgendaItem(item_type=matched, done=event.id in done, event=event))
        for task in self.custom_tasks():
            if task.due < now or task.due > horizon or task.item_type not in types:
                continue
            items.append(AgendaItem(item_type=task.item_type, done=task.id in done, task=task))
        items.sort(key=lambda item: _item_start(item, now.tzinfo))
        return items
