import json
import logging
from types import SimpleNamespace

import pytest

from timetabler import consumer
from timetabler.consumer import (
    callback,
    parse_optimizer_config,
    parse_optimizer_input,
    process_optimize_timetable,
)
from timetabler.exceptions import ConfigurationError

FAST_SETTINGS = {
    "population_size": 6,
    "generations": 3,
    "runs": 2,
    "elite_count": 1,
    "tournament_size": 2,
    "random_seed": 11,
}


@pytest.fixture()
def payload():
    return {
        "target_semester": 1,
        "periods": [["09:00", "10:00"], "10:00-11:00", {"start": "11:00", "end": "12:00"},
                    ["12:00", "13:00"], ["14:00", "15:00"]],
        "lunch_period": ["12:00", "13:00"],
        "rooms": [
            {"id": "r1", "name": "LH-101", "capacity": 60},
            {"id": 2, "name": "Lab-1", "capacity": 30, "type": "Lab"},
        ],
        "departments": [{
            "id": "d1",
            "name": "Computer Science",
            "code": "CSE",
            "regulations": [{"id": "R24", "name": "R2024", "year": 2024, "semesters": [
                {"id": "s1", "semester_number": 1, "courses": [
                    {"id": "c1", "code": "CSE101", "name": "Programming", "weekly_hours": 2},
                    {"id": "c2", "code": "CSE102", "name": "Discrete Maths", "weekly_hours": 1},
                ]},
            ]}],
            "batches": [{"id": "b1", "name": "CSE-2024-A", "regulation_id": "R24", "student_count": 40}],
            "faculty": [
                {"id": "f1", "name": "Dr. Alice Smith", "max_load": 18,
                 "eligible_course_ids": ["c1", "c2"], "preferences": ["Morning slots"]},
            ],
        }],
        "settings": dict(FAST_SETTINGS),
    }


class FakeChannel:
    def __init__(self):
        self.published = []
        self.acked = []

    def basic_publish(self, exchange, routing_key, properties, body):
        self.published.append({"routing_key": routing_key, "properties": properties, "body": json.loads(body)})

    def basic_ack(self, delivery_tag):
        self.acked.append(delivery_tag)


def _deliver(body, reply_to="reply-queue"):
    channel = FakeChannel()
    method = SimpleNamespace(delivery_tag=7)
    properties = SimpleNamespace(reply_to=reply_to, correlation_id="corr-1")
    callback(channel, method, properties, body)
    return channel


def test_parse_optimizer_input(payload):
    data = parse_optimizer_input(payload)

    assert data.target_semester == 1
    assert [room.id for room in data.rooms] == ["r1", "2"]
    assert data.rooms[1].type == "Lab"
    assert data.periods.slot_labels == ["09:00-10:00", "10:00-11:00", "11:00-12:00", "14:00-15:00"]

    department = data.departments[0]
    course = department.regulations[0].semester(1).courses[0]
    assert course.weekly_hours == 2
    assert course.department_id == "d1"
    assert department.faculty[0].eligible_course_ids == {"c1", "c2"}
    assert department.faculty[0].prefers_morning


def test_parse_optimizer_input_without_lunch(payload):
    payload["lunch_period"] = None
    data = parse_optimizer_input(payload)
    assert data.periods.lunch_period is None
    assert len(data.periods.slot_labels) == 5


def test_parse_optimizer_input_default_periods(payload):
    del payload["periods"]
    del payload["lunch_period"]
    data = parse_optimizer_input(payload)
    assert len(data.periods.slot_labels) == 6


def test_parse_optimizer_config_applies_known_overrides(caplog):
    with caplog.at_level(logging.WARNING):
        config = parse_optimizer_config({"population_size": 9, "colour": "blue"})

    assert config.population_size == 9
    assert "colour" in caplog.text


def test_parse_optimizer_config_rejects_invalid_values():
    with pytest.raises(ConfigurationError):
        parse_optimizer_config({"runs": 0})


def test_process_optimize_timetable_success(payload):
    response = process_optimize_timetable(payload)

    assert response["status"] == "success"
    results = response["data"]["results"]
    assert 1 <= len(results) <= 3
    assert [r["score"] for r in results] == sorted((r["score"] for r in results), reverse=True)

    best = results[0]
    assert best["name"].startswith("Optimized Schedule ")
    assert set(best["timetable"]) == {"Monday", "Tuesday", "Wednesday", "Thursday", "Friday"}
    assert set(best["metrics"]) == {
        "clustering_score", "distribution_score", "conflict_count",
        "utilization_rate", "faculty_balance", "student_gaps",
    }
    placed = [cell for slots in best["timetable"].values() for cells in slots.values() for cell in cells]
    assert len(placed) == 3
    assert best["needs_review"] == bool(best["conflicts"])

    json.dumps(response)


def test_process_optimize_timetable_precondition_error(payload):
    payload["target_semester"] = 5
    response = process_optimize_timetable(payload)

    assert response["status"] == "error"
    assert "No sessions" in response["message"]
    assert response["details"] == {"target_semester": 5}


def test_process_optimize_timetable_invalid_request(payload):
    del payload["target_semester"]
    response = process_optimize_timetable(payload)
    assert response["status"] == "error"
    assert response["message"].startswith("Invalid optimization request")


def test_process_optimize_timetable_invalid_settings(payload):
    payload["settings"]["elite_count"] = 100
    response = process_optimize_timetable(payload)
    assert response["status"] == "error"
    assert "elite_count" in response["message"]


def test_callback_test_connection():
    channel = _deliver(json.dumps({"pattern": "test_connection"}))

    assert channel.published[0]["routing_key"] == "reply-queue"
    assert channel.published[0]["body"]["status"] == "success"
    assert channel.published[0]["properties"].correlation_id == "corr-1"
    assert channel.acked == [7]


def test_callback_optimize_timetable(payload):
    channel = _deliver(json.dumps({"pattern": "optimize_timetable", "data": payload}))

    assert channel.published[0]["body"]["status"] == "success"
    assert channel.acked == [7]


def test_callback_unknown_command():
    channel = _deliver(json.dumps({"pattern": "delete_everything"}))

    assert channel.published[0]["body"] == {"status": "error", "message": "Unknown command: delete_everything"}
    assert channel.acked == [7]


def test_callback_acks_invalid_json():
    channel = _deliver(b"{not json")
    assert channel.published == []
    assert channel.acked == [7]


def test_callback_without_reply_to_does_not_publish():
    channel = _deliver(json.dumps({"pattern": "test_connection"}), reply_to=None)
    assert channel.published == []
    assert channel.acked == [7]


def test_callback_acks_when_processing_blows_up(monkeypatch):
    def explode(data):
        raise RuntimeError("boom")

    monkeypatch.setattr(consumer, "process_optimize_timetable", explode)
    channel = _deliver(json.dumps({"pattern": "optimize_timetable", "data": {}}))

    assert channel.published == []
    assert channel.acked == [7]


def test_parse_optimizer_config_rejects_non_object_settings():
    with pytest.raises(ConfigurationError, match="must be an object"):
        parse_optimizer_config("fast")


@pytest.mark.parametrize("mangle", [
    lambda data: data.update(departments=["cse"]),
    lambda data: data.update(settings="fast"),
])
def test_callback_replies_to_malformed_requests(payload, mangle):
    mangle(payload)
    channel = _deliver(json.dumps({"pattern": "optimize_timetable", "data": payload}))

    assert len(channel.published) == 1
    assert channel.published[0]["body"]["status"] == "error"
    assert channel.acked == [7]
