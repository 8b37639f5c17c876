"""
Draft/final answer values.

Clients send ``{"answers": {"<questionId>": <value>}}``. Each value is turned
into an explicit tagged union when the request body is parsed:

* ``RawAnswer`` (``kind="raw"``) for scalars, lists and null,
* ``StructuredAnswer`` (``kind="structured"``) for JSON objects.

A value that already carries ``kind: "raw"`` / ``kind: "structured"`` is taken
as the tagged form. The stored payload is always a JSON object: raw values are
wrapped as ``{"value": ...}``, structured values are stored as their fields.
"""
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, Field, field_validator

from talentgate.core.errors import coerce_id


class RawAnswer(BaseModel):
    kind: Literal["raw"] = "raw"
    value: Any = None

    def to_payload(self) -> Dict[str, Any]:
        return {"value": self.value}

    def choice(self) -> Any:
        return self.value

    def is_empty(self) -> bool:
        return self.value is None or self.value == ""


class StructuredAnswer(BaseModel):
    kind: Literal["structured"] = "structured"
    fields: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return dict(self.fields)

    def choice(self) -> Any:
        return self.fields.get("choice")

    def is_empty(self) -> bool:
        return not self.fields


AnswerValue = Annotated[Union[RawAnswer, StructuredAnswer], Field(discriminator="kind")]


def tag_answer(value: Any) -> Dict[str, Any]:
    """Decide the union member for one untagged client value."""
    if isinstance(value, dict):
        if value.get("kind") == "raw" and set(value) <= {"kind", "value"}:
            return value
        if value.get("kind") == "structured" and set(value) <= {"kind", "fields"}:
            return value
        return {"kind": "structured", "fields": value}
    return {"kind": "raw", "value": value}


def answer_from_payload(payload: Any) -> Union[RawAnswer, StructuredAnswer]:
    """Rebuild the tagged value from a stored ``response_json``."""
    if isinstance(payload, dict):
        if set(payload) == {"value"}:
            return RawAnswer(value=payload["value"])
        return StructuredAnswer(fields=payload)
    return RawAnswer(value=payload)


class AnswersIn(BaseModel):
    answers: Dict[str, AnswerValue] = Field(default_factory=dict)

    @field_validator("answers", mode="before")
    @classmethod
    def tag_values(cls, v):
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("answers must be an object keyed by question id")
        return {str(k): tag_answer(val) for k, val in v.items()}

    def by_question_id(self) -> Dict[int, Union[RawAnswer, StructuredAnswer]]:
        """Question ids within the key range only; other keys are ignored."""
        out: Dict[int, Union[RawAnswer, StructuredAnswer]] = {}
        for key, value in self.answers.items():
            qid = coerce_id(key)
            if qid is None:
                continue
            out[qid] = value
        return out
