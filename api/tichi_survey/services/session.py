"""
Survey session state for one respondent.

A ``SurveySession`` owns the respondent's form data for the lifetime of one
survey run: which section is on screen, the user info, and the answers given
so far. Its methods are the only writers of that state. Collaborators (the
HTTP client, the view's scroll hook and the user notifier) are passed in by
the caller that builds the session.
"""

import logging
from typing import Any, Callable

import httpx

from ..config import SUBMIT_PATH, SURVEY_API_URL
from ..schemas import FormData, Section, SurveyResponse, UserInfo

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to submit survey"


class SubmissionFailed(Exception):
    pass


def _log_notification(message: str) -> None:
    logger.warning("[session] %s", message)


def extract_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return GENERIC_FAILURE_MESSAGE
    message = body.get("message") if isinstance(body, dict) else None
    return str(message) if message else GENERIC_FAILURE_MESSAGE


class SurveySession:
    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        api_url: str = SURVEY_API_URL,
        submit_path: str = SUBMIT_PATH,
        on_navigate: Callable[[Section], None] | None = None,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self.current_section = Section.WELCOME
        self.form_data = FormData()
        self.is_submitting = False
        self._http_client = http_client
        self._submit_url = f"{api_url.rstrip('/')}{submit_path}"
        self._on_navigate = on_navigate
        self._notify = notify or _log_notification

    def navigate(self, section: Section) -> None:
        if self._on_navigate is not None:
            self._on_navigate(section)
        self.current_section = section

    def update_user_info(self, info: UserInfo) -> None:
        self.form_data.user_info = info

    def update_response(self, response: SurveyResponse) -> None:
        responses = self.form_data.responses
        for index, existing in enumerate(responses):
            if existing.question_id == response.question_id:
                responses[index] = response
                return
        responses.append(response)

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(self._submit_url, json=payload)
        async with httpx.AsyncClient(timeout=None) as client:
            return await client.post(self._submit_url, json=payload)

    async def submit_survey(self) -> None:
        self.is_submitting = True
        try:
            # the submitted record is a snapshot; later edits do not leak into the request
            payload = self.form_data.to_payload()
            response = await self._post(payload)
            if not response.is_success:
                message = extract_error_message(response)
                logger.error("[session] error submitting survey status=%s message=%s", response.status_code, message)
                raise SubmissionFailed(message)
            self.navigate(Section.THANK_YOU)
        except Exception as exc:
            logger.error("[session] error submitting survey: %s", exc)
            self._notify(f"Submission failed: {str(exc) or GENERIC_FAILURE_MESSAGE}")
        finally:
            self.is_submitting = False
