import json
from functools import lru_cache
from typing import Any

from .config import QUESTIONS_PATH
from .schemas import Question, QuestionType, Section

QUESTION_SECTIONS: tuple[Section, ...] = (Section.BASICS, Section.NEEDS, Section.TICHI, Section.JOURNEY)


@lru_cache(maxsize=1)
def get_file_survey_definition() -> dict[str, Any]:
    with QUESTIONS_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def parse_question_catalog(definition: dict[str, Any]) -> list[Question]:
    raw = definition.get("questions") if isinstance(definition.get("questions"), list) else []
    questions: list[Question] = []
    seen: set[str] = set()
    for item in raw:
        q = Question.model_validate(item)
        if q.id in seen:
            raise ValueError(f"duplicate question id: {q.id}")
        if q.category not in QUESTION_SECTIONS:
            raise ValueError(f"question {q.id} has category {q.category.value}, which is not a question section")
        if q.type == QuestionType.MULTI_CHOICE and not q.options:
            raise ValueError(f"choice question {q.id} has no options")
        seen.add(q.id)
        questions.append(q)
    return questions


@lru_cache(maxsize=1)
def get_question_catalog() -> tuple[Question, ...]:
    return tuple(parse_question_catalog(get_file_survey_definition()))


def get_section_questions(section: Section) -> list[Question]:
    return [q for q in get_question_catalog() if q.category == section]


def get_section_titles() -> dict[Section, str]:
    out: dict[Section, str] = {}
    for item in get_file_survey_definition().get("sections", []):
        try:
            out[Section(item.get("key"))] = str(item.get("title") or "")
        except ValueError:
            continue
    return out
