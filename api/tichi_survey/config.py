import os
from pathlib import Path

APP_NAME = "Tichi Survey API"
APP_ENV = os.getenv("APP_ENV", "development")
DATABASE_URL = os.getenv("DATABASE_URL", "")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SUBMIT_PATH = "/api/survey/submit"
SURVEY_API_URL = os.getenv("SURVEY_API_URL", "http://localhost:5000")
RESPONSES_COLLECTION = "TichiSurveyResponses"

_default_questions = Path(__file__).resolve().parent / "questions.json"
QUESTIONS_PATH = Path(os.getenv("QUESTIONS_PATH", str(_default_questions)))

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

DB_WAIT_ATTEMPTS = int(os.getenv("DB_WAIT_ATTEMPTS", "20"))
DB_WAIT_DELAY_SECONDS = float(os.getenv("DB_WAIT_DELAY_SECONDS", "1.5"))


def require_database_url() -> str:
    url = os.getenv("DATABASE_URL", DATABASE_URL).strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not defined in the environment")
    return url
