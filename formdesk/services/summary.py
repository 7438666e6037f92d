from collections import Counter
from typing import Dict, Iterable, List

from pydantic import BaseModel

from formdesk.models.form import QuestionType

class QuestionSummary(BaseModel):
    question_id: str
    question_text: str
    question_type: QuestionType
    total_answers: int
    answer_tally: Dict[str, int]

class Summary(BaseModel):
    total_responses: int
    questions: List[QuestionSummary]

def _ordered_tally(counts: Counter, options: List[str]) -> Dict[str, int]:
    # Known options keep the form's order, values left over from older edits follow sorted
    tally = {option: counts[option] for option in options if counts[option]}
    for value in sorted(value for value in counts if value not in tally):
        tally[value] = counts[value]
    return tally

def summarize(form, responses: Iterable) -> Summary:
    """
    Count answers per question over every response to a form

    Blank answers, stored for optional questions that were skipped, are not
    counted. Only single-choice questions get a per-option tally.
    """
    responses = list(responses)
    answered: Counter = Counter()
    choices: Dict[str, Counter] = {}

    for response in responses:
        for answer in response.answers or []:
            value = answer.get("answer")
            if value is None or str(value).strip() == "":
                continue
            question_id = answer["question_id"]
            answered[question_id] += 1
            choices.setdefault(question_id, Counter())[str(value)] += 1

    questions = []
    for question in form.questions or []:
        if question["type"] == QuestionType.SINGLE_CHOICE.value:
            tally = _ordered_tally(choices.get(question["id"], Counter()), question.get("options", []))
        else:
            tally = {}
        questions.append(QuestionSummary(
            question_id=question["id"],
            question_text=question["text"],
            question_type=question["type"],
            total_answers=answered[question["id"]],
            answer_tally=tally,
        ))

    return Summary(total_responses=len(responses), questions=questions)
