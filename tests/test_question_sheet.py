import pytest

from conftest import CANDIDATE, OTHER_CANDIDATE, auth
from talentgate.services.question_sheet import parse_duration_seconds


@pytest.mark.parametrize("text,expected", [
    ("30 min", 1800),
    ("1 hour", 3600),
    ("1 hour 30 min", 5400),
    ("90 minutes", 5400),
    ("2hrs", 7200),
    ("20", 1200),
    ("", None),
    (None, None),
    ("soon", None),
])
def test_parse_duration_seconds(text, expected):
    assert parse_duration_seconds(text) == expected


def test_questions_are_ordered_and_hide_correct_answers(client, start):
    attempt_id = start()
    r = client.get(f"/v1/assessments/7/attempts/{attempt_id}/questions", headers=auth(CANDIDATE))
    assert r.status_code == 200
    body = r.json()
    assert [q["id"] for q in body["questions"]] == [12, 13, 14]
    assert all("correctAnswer" not in q for q in body["questions"])
    # JSON-string options are decoded
    assert body["questions"][1]["optionsJson"] == [{"id": "C", "label": "C"}]
    assert body["meta"]["title"] == "Backend screening"
    assert body["meta"]["durationSec"] == 5400
    assert body["meta"]["attemptStatus"] == "in_progress"
    assert body["meta"]["startedAt"]


def test_questions_are_private_to_the_candidate(client, start):
    attempt_id = start()
    r = client.get(f"/v1/assessments/7/attempts/{attempt_id}/questions", headers=auth(OTHER_CANDIDATE))
    assert r.status_code == 403


def test_questions_without_position_come_last(client, start):
    attempt_id = start(assessment_id=8)
    body = client.get(f"/v1/assessments/8/attempts/{attempt_id}/questions", headers=auth(CANDIDATE)).json()
    assert [(q["id"], q["orderIndex"]) for q in body["questions"]] == [(21, 1), (20, None)]
    assert body["meta"]["durationSec"] == 1200


def test_questions_locked_after_submit(client, start):
    attempt_id = start()
    assert client.post(f"/v1/assessments/7/attempts/{attempt_id}/submit", headers=auth(CANDIDATE), json={"answers": {}}).status_code == 200
    r = client.get(f"/v1/assessments/7/attempts/{attempt_id}/questions", headers=auth(CANDIDATE))
    assert r.status_code == 409
