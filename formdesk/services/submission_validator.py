"""
Server-side admission checks for public form submissions.

The validator never touches the database itself. The caller loads the form,
passes a lookup for earlier responses, and persists the accepted answers.
"""
import enum
import logging
from typing import Callable, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel

from formdesk.models.form import QuestionType
from formdesk.schemas.response import AnswerSnapshot, AnswerSubmit

logger = logging.getLogger("formdesk.submissions")

class RejectionKind(str, enum.Enum):
    FORM_UNAVAILABLE = "form_unavailable"
    ANSWER_COUNT_MISMATCH = "answer_count_mismatch"
    UNKNOWN_QUESTION = "unknown_question"
    REQUIRED_QUESTION_UNANSWERED = "required_question_unanswered"
    INVALID_OPTION = "invalid_option"
    EMAIL_REQUIRED = "email_required"
    DUPLICATE_SUBMISSION = "duplicate_submission"

class Accepted(BaseModel):
    accepted: Literal[True] = True
    answers: List[AnswerSnapshot]

class Rejected(BaseModel):
    accepted: Literal[False] = False
    kind: RejectionKind
    message: str
    question_id: Optional[str] = None
    answer_value: Optional[str] = None

ValidationResult = Union[Accepted, Rejected]

def answer_text(value) -> str:
    """Submitted answer as a string, untrimmed so option matching stays exact"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

def normalize_answer_value(value) -> str:
    """Answer as it gets stored"""
    return answer_text(value).strip()

def validate_submission(
    form,
    raw_answers: Sequence[AnswerSubmit],
    submitter_email: Optional[str] = None,
    origin_address: Optional[str] = None,
    find_prior_response: Optional[Callable[..., object]] = None,
) -> ValidationResult:
    """
    Decide whether a submission to a form is admissible

    Args:
        form: Form to submit to, or None when it could not be loaded
        raw_answers: Submitted (question_id, answer) pairs
        submitter_email: Optional respondent email, already normalized
        origin_address: Client address of the request
        find_prior_response: Called as find_prior_response(email=...) or
            find_prior_response(origin_address=...); returns an earlier
            response for this form or None

    Returns:
        Accepted with one answer snapshot per question in form order,
        or Rejected describing the first failed check
    """
    if form is None or not form.is_active:
        return Rejected(
            kind=RejectionKind.FORM_UNAVAILABLE,
            message="Form not found or inactive",
        )

    questions = form.questions or []
    if len(raw_answers) != len(questions):
        return Rejected(
            kind=RejectionKind.ANSWER_COUNT_MISMATCH,
            message="Number of answers does not match number of questions",
        )

    questions_by_id = {question["id"]: question for question in questions}
    answers_by_id = {}
    for raw in raw_answers:
        if raw.question_id not in questions_by_id:
            return Rejected(
                kind=RejectionKind.UNKNOWN_QUESTION,
                message="Answer does not belong to a question of this form",
                question_id=raw.question_id,
            )
        if raw.question_id in answers_by_id:
            return Rejected(
                kind=RejectionKind.UNKNOWN_QUESTION,
                message="Question was answered more than once",
                question_id=raw.question_id,
            )
        answers_by_id[raw.question_id] = answer_text(raw.answer)

    for question in questions:
        if question.get("required") and not answers_by_id[question["id"]].strip():
            return Rejected(
                kind=RejectionKind.REQUIRED_QUESTION_UNANSWERED,
                message=f'Required question "{question["text"]}" is not answered',
                question_id=question["id"],
            )

    for question in questions:
        value = answers_by_id[question["id"]]
        if question["type"] != QuestionType.SINGLE_CHOICE.value or not value.strip():
            continue
        if value not in question.get("options", []):
            return Rejected(
                kind=RejectionKind.INVALID_OPTION,
                message=f'Invalid option for question "{question["text"]}"',
                question_id=question["id"],
                answer_value=value,
            )

    if form.require_email and not submitter_email:
        return Rejected(
            kind=RejectionKind.EMAIL_REQUIRED,
            message="An email address is required to respond to this form",
        )

    if not form.allow_multiple_responses and find_prior_response is not None:
        # Falls back to the client address, which NAT and proxies can share
        if submitter_email:
            prior = find_prior_response(email=submitter_email)
        elif origin_address:
            prior = find_prior_response(origin_address=origin_address)
        else:
            prior = None
        if prior is not None:
            logger.info(f"Duplicate submission blocked for form {form.id}")
            return Rejected(
                kind=RejectionKind.DUPLICATE_SUBMISSION,
                message="You have already submitted a response to this form",
            )

    return Accepted(
        answers=[
            AnswerSnapshot(
                question_id=question["id"],
                question_text=question["text"],
                question_type=question["type"],
                answer=normalize_answer_value(answers_by_id[question["id"]]),
            )
            for question in questions
        ]
    )
