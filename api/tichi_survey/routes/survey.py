import logging
from typing import Any

from fastapi import APIRouter

from ..config import SUBMIT_PATH
from ..schemas import ErrorResponse, SubmitSuccessResponse
from ..services.intake import submit_survey_response

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(SUBMIT_PATH, status_code=201, response_model=SubmitSuccessResponse, responses=ERROR_RESPONSES)
def submit_survey(payload: dict[str, Any]) -> dict[str, Any]:
    logger.info("[intake] processing survey submission")
    saved = submit_survey_response(payload)
    return {"message": "Survey response saved successfully", "data": saved}
