import argparse
import asyncio
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from tichi_survey.config import SURVEY_API_URL
from tichi_survey.schemas import Question, QuestionType, Section, SurveyResponse, UserInfo
from tichi_survey.services.session import SurveySession
from tichi_survey.survey_loader import QUESTION_SECTIONS, get_section_questions, get_section_titles


def ask_question(question: Question) -> str:
    print(f"\n{question.text}")
    if question.type != QuestionType.MULTI_CHOICE:
        return input("> ").strip()

    options = question.options or []
    for index, option in enumerate(options, start=1):
        print(f"  {index}. {option}")
    while True:
        raw = input("> ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(options):
            return options[int(raw) - 1]
        print(f"Pick a number between 1 and {len(options)}")


def clear_screen(section: Section) -> None:
    print("\n" * 2)


def main() -> None:
    parser = argparse.ArgumentParser(description="Take the Tichi campus survey from a terminal")
    parser.add_argument("--api-url", type=str, default=SURVEY_API_URL)
    args = parser.parse_args()

    session = SurveySession(api_url=args.api_url, on_navigate=clear_screen, notify=print)
    titles = get_section_titles()

    print("Welcome to the Tichi campus survey")
    full_name = input("Full name: ").strip()
    email = input("Email: ").strip()
    session.update_user_info(UserInfo(full_name=full_name, email=email))

    for section in QUESTION_SECTIONS:
        session.navigate(section)
        print(f"== {titles.get(section, section.value)} ==")
        for question in get_section_questions(section):
            answer = ask_question(question)
            session.update_response(SurveyResponse(question_id=question.id, answer=answer))

    asyncio.run(session.submit_survey())
    if session.current_section == Section.THANK_YOU:
        print("Thank you! Your responses have been recorded.")
    else:
        sys.exit(1)


if __name__ == "__main__":
    main()
