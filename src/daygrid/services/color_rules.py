from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence
from uuid import uuid4

import orjson

from ..core import PreferenceStore
from ..domain import ColorRule

logger = logging.getLogger(__name__)

STORAGE_KEY = "daygrid_color_rules"

DEFAULT_RULES: tuple[tuple[str, str, tuple[str, ...], str], ...] = (
    ("1", "Classes", ("lecture", "class", "discussion", "section", "seminar", "lab section"), "#3b82f6"),
    ("2", "Homework", ("homework", "assignment", "due", "submission", "problem set", "pset", "project"), "#22c55e"),
    ("3", "Exams", ("exam", "midterm", "final", "quiz", "test", "assessment"), "#ef4444"),
    ("4", "Meetings", ("meeting", "1:1", "standup", "sync", "call", "interview", "check-in"), "#8b5cf6"),
    ("5", "Social", ("lunch", "coffee", "dinner", "social", "party", "hangout", "brunch"), "#f97316"),
    ("6", "Office Hours", ("office hours", "OH", "tutoring", "help session", "study group"), "#06b6d4"),
    ("7", "Work", ("work", "shift", "job", "internship", "research"), "#eab308"),
)


def default_rules() -> List[ColorRule]:
    return [
        ColorRule(id=rule_id, name=name, keywords=list(keywords), color=color)
        for rule_id, name, keywords, color in DEFAULT_RULES
    ]


@dataclass(slots=True)
class ColorRuleService:
    preferences: PreferenceStore

    def load(self) -> List[ColorRule]:
        raw = self.preferences.get(STORAGE_KEY)
        if not raw:
            return default_rules()
        try:
            payload = orjson.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("color rules must be a JSON list")
            return [ColorRule.from_record(record) for record in payload]
        except (orjson.JSONDecodeError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Stored color rules are unreadable, using defaults: %s", exc)
            return default_rules()

    def save(self, rules: Sequence[ColorRule]) -> None:
        payload = orjson.dumps([rule.to_record() for rule in rules])
        self.preferences.set(STORAGE_KEY, payload.decode("utf-8"))

    def reset(self) -> List[ColorRule]:
        rules = default_rules()
        self.save(rules)
        return rules

    def add_rule(self, name: str, keywords: Sequence[str], color: str) -> ColorRule:
        rules = self.load()
        rule = ColorRule(
            id=str(uuid4()),
            name=name,
            keywords=[keyword.strip() for keyword in keywords if keyword.strip()],
            color=color,
        )
        rules.append(rule)
        self.save(rules)
        return rule

    def remove_rule(self, rule_id: str) -> bool:
        rules = self.load()
        remaining = [rule for rule in rules if rule.id != rule_id]
        if len(remaining) == len(rules):
            return False
        self.save(remaining)
        return True
