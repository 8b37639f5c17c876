import pytest
from pydantic import ValidationError

from talentgate.models.answers import AnswersIn, RawAnswer, StructuredAnswer, answer_from_payload


def test_scalars_become_raw_and_objects_become_structured():
    body = AnswersIn.model_validate({"answers": {"12": "B", "13": {"choice": "C"}, "14": None, "15": [1, 2]}})
    by_qid = body.by_question_id()
    assert isinstance(by_qid[12], RawAnswer) and by_qid[12].value == "B"
    assert isinstance(by_qid[13], StructuredAnswer) and by_qid[13].fields == {"choice": "C"}
    assert isinstance(by_qid[14], RawAnswer) and by_qid[14].value is None
    assert by_qid[15].to_payload() == {"value": [1, 2]}


def test_payload_envelopes():
    assert RawAnswer(value="B").to_payload() == {"value": "B"}
    assert StructuredAnswer(fields={"choice": "C", "note": "x"}).to_payload() == {"choice": "C", "note": "x"}


def test_explicitly_tagged_values_are_kept():
    body = AnswersIn.model_validate({"answers": {
        "1": {"kind": "raw", "value": "A"},
        "2": {"kind": "structured", "fields": {"code": "print(1)"}},
    }})
    by_qid = body.by_question_id()
    assert by_qid[1] == RawAnswer(value="A")
    assert by_qid[2] == StructuredAnswer(fields={"code": "print(1)"})


def test_non_numeric_question_ids_are_ignored():
    body = AnswersIn.model_validate({"answers": {"abc": "x", "7": "y"}})
    assert list(body.by_question_id()) == [7]


def test_question_ids_must_be_plain_in_range_integers():
    body = AnswersIn.model_validate({"answers": {
        "9223372036854775807": "max", "9223372036854775808": "over", "7_0": "x", " 8 ": "y", "0": "z", "-3": "w",
    }})
    assert list(body.by_question_id()) == [9223372036854775807]


def test_missing_answers_is_empty():
    assert AnswersIn.model_validate({}).by_question_id() == {}
    assert AnswersIn.model_validate({"answers": None}).by_question_id() == {}


def test_answers_must_be_an_object():
    with pytest.raises(ValidationError):
        AnswersIn.model_validate({"answers": ["B"]})


def test_answer_from_payload_round_trips_stored_shapes():
    assert answer_from_payload({"value": "B"}) == RawAnswer(value="B")
    assert answer_from_payload({"choice": "C"}) == StructuredAnswer(fields={"choice": "C"})
    assert answer_from_payload(None) == RawAnswer(value=None)


def test_choice_and_emptiness():
    assert RawAnswer(value="B").choice() == "B"
    assert StructuredAnswer(fields={"choice": "C"}).choice() == "C"
    assert RawAnswer(value="").is_empty()
    assert RawAnswer(value=0).is_empty() is False
    assert StructuredAnswer(fields={}).is_empty()
