from typing import Any

from .database import SessionLocal, ensure_schema
from .models import SurveyResponseDocument
from .schemas import SubmissionRecord


def _document_to_dict(doc: SurveyResponseDocument) -> dict[str, Any]:
    return {
        "_id": doc.id,
        "userInfo": doc.user_info,
        "responses": doc.responses,
        "submittedAt": doc.submitted_at.isoformat(),
    }


def insert_survey_response(record: SubmissionRecord) -> dict[str, Any]:
    payload = record.model_dump(mode="json", by_alias=True)
    doc = SurveyResponseDocument(
        id=record.id,
        user_info=payload["userInfo"],
        responses=payload["responses"],
        submitted_at=record.submitted_at,
    )
    ensure_schema()
    with SessionLocal() as db:
        db.add(doc)
        db.commit()
        return _document_to_dict(doc)
