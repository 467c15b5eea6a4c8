from datetime import timedelta, timezone
from types import SimpleNamespace

import orjson
import pytest

from conftest import DAY, at, timed
from daygrid.config import LlmSettings
from daygrid.domain import CommandType, CreateUndo, DeleteUndo, EditUndo
from daygrid.llm import CommandImage, CommandPlan, CommandPlanner, CommandPlannerError
from daygrid.llm.planner import relevant_events
from daygrid.llm.prompts import IMAGE_DEFAULT_REQUEST
from daygrid.services import CalendarService, CommandService
from daygrid.services.commands import HISTORY_MESSAGES, review_creates

LLM = LlmSettings(api_key="test-key", model="gpt-4o-mini", base_url=None, organization=None)


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        content = self.replies.pop(0)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def fake_client(*replies):
    completions = FakeCompletions(orjson.dumps(reply).decode() for reply in replies)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def create_reply(*events):
    return {
        "type": "create",
        "events": [
            {
                "summary": summary,
                "start": {"dateTime": f"2026-01-22T{start}:00+00:00"},
                "end": {"dateTime": f"2026-01-22T{end}:00+00:00"},
            }
            for summary, start, end in events
        ],
    }


@pytest.fixture
def calendar(context, sink):
    sink.events = {"lecture": timed("lecture", "14:00", "15:00", summary="CS Lecture")}
    service = CalendarService(context)
    service.refresh(DAY)
    return service


def make_service(calendar, *replies):
    planner = CommandPlanner(LLM, tz=timezone.utc, client=fake_client(*replies))
    return CommandService(calendar, planner), planner


class TestPlanParsing:
    def test_parse_choice_reads_provider_field_names(self):
        planner = CommandPlanner(LLM, tz=timezone.utc, client=fake_client())
        plan = planner.parse_choice(
            '{"type": "delete", "eventsToDelete": [{"id": "x", "calendarId": "work"}], "message": "Sure"}'
        )
        assert plan.type is CommandType.DELETE
        assert plan.events_to_delete[0].calendar_id == "work"

    def test_invalid_reply_raises(self):
        planner = CommandPlanner(LLM, tz=timezone.utc, client=fake_client())
        with pytest.raises(CommandPlannerError):
            planner.parse_choice('{"type": "dance"}')

    def test_unconfigured_planner_refuses(self):
        planner = CommandPlanner(LlmSettings(None, "gpt-4o-mini", None, None), tz=timezone.utc)
        with pytest.raises(CommandPlannerError, match="OPENAI_API_KEY"):
            planner.plan("hello", [], [])

    def test_prompt_lists_only_upcoming_events(self):
        events = [timed("old", "09:00", "10:00", day=DAY - timedelta(days=1)), timed("new", "09:00", "10:00")]
        assert [event.id for event in relevant_events(events, DAY, timezone.utc)] == ["new"]
        planner = CommandPlanner(LLM, tz=timezone.utc, client=fake_client())
        prompt = planner.system_prompt(events, DAY)
        assert "2026-01-22" in prompt
        assert "new | primary" in prompt
        assert "old | primary" not in prompt


class TestCreateReview:
    def test_duplicates_within_request_are_dropped(self):
        plan = CommandPlan.model_validate(create_reply(("Gym", "07:00", "08:00"), ("Gym", "07:00", "08:00")))
        review = review_creates(plan.events, [], timezone.utc)
        assert len(review.pending) == 1

    def test_existing_events_are_not_recreated(self):
        plan = CommandPlan.model_validate(create_reply(("cs lecture", "14:00", "15:00")))
        review = review_creates(plan.events, [timed("lecture", "14:00", "15:00", summary="CS Lecture")], timezone.utc)
        assert review.pending == []
        assert review.duplicates == ["cs lecture"]

    def test_overlaps_are_reported(self):
        plan = CommandPlan.model_validate(create_reply(("Office hours", "14:30", "15:30")))
        review = review_creates(plan.events, [timed("lecture", "14:00", "15:00", summary="CS Lecture")], timezone.utc)
        assert review.conflicts == [("Office hours", "CS Lecture")]


class TestCommandService:
    def test_question_needs_no_confirmation(self, calendar):
        service, _ = make_service(calendar, {"type": "question", "answer": "You have one lecture."})
        pending = service.submit("what's on today?", today=DAY)
        assert pending.message == "You have one lecture."
        assert not pending.needs_confirmation

    def test_create_is_applied_only_on_confirm(self, calendar, context, sink):
        service, _ = make_service(calendar, create_reply(("Study", "16:00", "17:00")))
        pending = service.submit("study at 4", today=DAY)

        assert pending.needs_confirmation
        assert "Study" in pending.message
        assert len(sink.events) == 1

        results = service.confirm(pending)
        assert all(result.ok for result in results)
        assert len(sink.events) == 2
        assert isinstance(context.undo.pop(), CreateUndo)

    def test_delete_resolves_known_events(self, calendar, context, sink):
        reply = {"type": "delete", "eventsToDelete": [{"id": "lecture"}, {"id": "ghost"}], "message": "Delete it?"}
        service, _ = make_service(calendar, reply)
        pending = service.submit("cancel my lecture", today=DAY)

        assert [event.id for event in pending.deletes] == ["lecture"]
        service.confirm(pending)
        assert "lecture" not in sink.events
        assert isinstance(context.undo.pop(), DeleteUndo)

    def test_update_builds_a_patch(self, calendar, context, sink):
        reply = {
            "type": "update",
            "eventToUpdate": {"id": "lecture", "start": {"dateTime": "2026-01-22T16:00:00+00:00"}},
        }
        service, _ = make_service(calendar, reply)
        pending = service.submit("move lecture to 4", today=DAY)
        target, patch = pending.update
        assert target.id == "lecture"
        assert patch.start == at(DAY, "16:00")

        service.confirm(pending)
        assert sink.events["lecture"].start == at(DAY, "16:00")
        entry = context.undo.pop()
        assert isinstance(entry, EditUndo)
        assert entry.original.start == at(DAY, "14:00")

    def test_unknown_update_target_is_reported(self, calendar):
        service, _ = make_service(calendar, {"type": "update", "eventToUpdate": {"id": "ghost"}})
        pending = service.submit("rename ghost", today=DAY)
        assert not pending.needs_confirmation

    def test_history_keeps_three_exchanges(self, calendar):
        replies = [{"type": "question", "answer": f"answer {index}"} for index in range(5)]
        service, planner = make_service(calendar, *replies)
        for index in range(5):
            service.submit(f"question {index}", today=DAY)

        assert len(service.history) == HISTORY_MESSAGES
        assert service.history[0]["content"] == "question 2"
        last_request = planner._client.chat.completions.requests[-1]
        assert last_request["messages"][-1] == {"role": "user", "content": "question 4"}
        assert len(last_request["messages"]) == 1 + HISTORY_MESSAGES + 1


class TestImageCommands:
    def test_image_is_sent_as_multimodal_content(self, calendar):
        service, planner = make_service(calendar, create_reply(("Lab 3 report", "17:00", "18:00")))
        image = CommandImage(data=b"\x89PNG fake", mime_type="image/png")

        pending = service.submit("add these deadlines", today=DAY, image=image)

        assert pending.needs_confirmation
        content = planner._client.chat.completions.requests[0]["messages"][-1]["content"]
        assert content[0] == {"type": "text", "text": "add these deadlines"}
        assert content[1]["image_url"]["url"].startswith("data:image/png;base64,")

    def test_image_without_text_uses_the_extraction_request(self, calendar):
        service, planner = make_service(calendar, {"type": "question", "answer": "Nothing found."})
        service.submit("", today=DAY, image=CommandImage(data=b"img"))

        content = planner._client.chat.completions.requests[0]["messages"][-1]["content"]
        assert content[0]["text"] == IMAGE_DEFAULT_REQUEST
        assert service.history[0] == {"role": "user", "content": "[image]"}

    def test_history_keeps_text_only_for_image_commands(self, calendar):
        service, _ = make_service(calendar, {"type": "question", "answer": "ok"})
        service.submit("what is due?", today=DAY, image=CommandImage(data=b"img"))
        assert service.history[0]["content"] == "[image] what is due?"

    def test_non_image_files_are_rejected(self, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("not an image")
        with pytest.raises(ValueError):
            CommandImage.from_path(notes)

    def test_image_files_keep_their_mime_type(self, tmp_path):
        photo = tmp_path / "syllabus.jpg"
        photo.write_bytes(b"\xff\xd8\xff")
        image = CommandImage.from_path(photo)
        assert image.mime_type == "image/jpeg"
        assert image.data_url().startswith("data:image/jpeg;base64,")
