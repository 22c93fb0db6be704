"""
Submission intake: structural validation and persistence of survey submissions.

Validation runs in a fixed order and stops at the first failing check.
Persistence failures are classified into schema rejections, duplicate keys,
an unavailable store, and everything else.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError, UnboundExecutionError

from .. import repo
from ..schemas import SubmissionRecord

logger = logging.getLogger(__name__)

MISSING = object()


def _absent(value: Any) -> bool:
    # empty objects and arrays count as present; only null and falsy scalars are absent
    return value is None or (isinstance(value, (bool, int, float, str)) and not value)


class IntakeError(Exception):
    """Raised when a submission cannot be accepted; rendered as {error, details}."""

    def __init__(self, status_code: int, error: str, details: str | list[str]):
        self.status_code = status_code
        self.error = error
        self.details = details
        super().__init__(error)

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "details": self.details}


def validate_submission(payload: Any) -> None:
    body = payload if isinstance(payload, dict) else {}
    user_info = body.get("userInfo")
    responses = body.get("responses")

    if _absent(user_info) or _absent(responses):
        logger.error(
            "[intake] missing required fields userInfo=%s responses=%s",
            not _absent(user_info),
            not _absent(responses),
        )
        raise IntakeError(400, "Invalid request body", "Request must include userInfo and responses")

    full_name = user_info.get("fullName") if isinstance(user_info, dict) else None
    email = user_info.get("email") if isinstance(user_info, dict) else None
    if _absent(full_name) or _absent(email):
        logger.error("[intake] invalid userInfo: %s", user_info)
        raise IntakeError(400, "Invalid userInfo", "userInfo must include fullName and email")

    if not isinstance(responses, list) or len(responses) == 0:
        logger.error("[intake] invalid responses: %s", responses)
        raise IntakeError(400, "Invalid responses", "responses must be a non-empty array")

    for response in responses:
        item = response if isinstance(response, dict) else {}
        # answer is presence-checked: "", 0, false and null are all valid answers
        if _absent(item.get("questionId")) or item.get("answer", MISSING) is MISSING:
            logger.error("[intake] invalid response object: %s", response)
            raise IntakeError(400, "Invalid response object", "Each response must include questionId and answer")

    logger.info("[intake] validation passed responses=%s", len(responses))


def _schema_error_messages(exc: ValidationError) -> list[str]:
    messages: list[str] = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{path}: {err.get('msg')}" if path else str(err.get("msg")))
    return messages


def build_record(payload: dict[str, Any], now: datetime | None = None) -> SubmissionRecord:
    document = {
        **payload,
        "_id": str(uuid.uuid4()),
        "submittedAt": now or datetime.now(timezone.utc),
    }
    try:
        return SubmissionRecord.model_validate(document)
    except ValidationError as exc:
        details = _schema_error_messages(exc)
        logger.error("[intake] document schema rejected submission: %s", details)
        raise IntakeError(400, "Validation Error", details)


def persist_submission(payload: dict[str, Any]) -> dict[str, Any]:
    record = build_record(payload)
    try:
        saved = repo.insert_survey_response(record)
    except IntegrityError as exc:
        logger.error("[intake] duplicate document name=%s message=%s", type(exc).__name__, exc)
        raise IntakeError(409, "Duplicate Entry", "A survey response with this information already exists")
    except (OperationalError, InterfaceError, UnboundExecutionError) as exc:
        logger.error("[intake] store unavailable name=%s message=%s", type(exc).__name__, exc)
        raise IntakeError(500, "Database connection not ready", str(exc))
    except SQLAlchemyError as exc:
        logger.exception("[intake] failed to save survey response name=%s", type(exc).__name__)
        raise IntakeError(500, "Failed to save survey response", str(exc))

    logger.info("[intake] saved survey response id=%s", saved.get("_id"))
    return saved


def submit_survey_response(payload: Any) -> dict[str, Any]:
    validate_submission(payload)
    return persist_submission(payload)
