import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB

from .config import RESPONSES_COLLECTION
from .database import Base

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyResponseDocument(Base):
    __tablename__ = RESPONSES_COLLECTION

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_info = Column(JSONDocument, nullable=False)
    responses = Column(JSONDocument, nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (Index("idx_tichi_survey_responses_submitted_at", "submitted_at"),)
