import csv
import io
from typing import List, Sequence, Tuple

from formdesk.utils.helpers import format_datetime, sanitize_filename

METADATA_COLUMNS = ["Response ID", "Submitted At", "Submitter Email", "Submitter Name", "IP Address"]

def _question_columns(form, responses: Sequence) -> List[Tuple[str, str]]:
    """
    Work out (question_id, header) pairs for the answer columns

    Current questions come first in form order. Questions that only exist in
    stored snapshots, because the form was edited afterwards, are appended in
    the order they are first seen.
    """
    columns = [(question["id"], question["text"]) for question in form.questions or []]
    seen = {question_id for question_id, _ in columns}
    for response in responses:
        for answer in response.answers or []:
            if answer["question_id"] not in seen:
                seen.add(answer["question_id"])
                columns.append((answer["question_id"], answer["question_text"]))
    return columns

def export_responses_csv(form, responses: Sequence) -> str:
    """
    Render responses to a form as CSV text

    Args:
        form: Form the responses belong to
        responses: Responses in the row order wanted, usually newest first

    Returns:
        CSV document with a header row
    """
    columns = _question_columns(form, responses)

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(METADATA_COLUMNS + [header for _, header in columns])

    for response in responses:
        values = {answer["question_id"]: answer.get("answer", "") for answer in response.answers or []}
        writer.writerow(
            [
                response.id,
                format_datetime(response.submitted_at) or "",
                response.submitter_email or "",
                response.submitter_name or "",
                response.ip_address or "",
            ]
            + [values.get(question_id, "") for question_id, _ in columns]
        )

    return buffer.getvalue()

def export_filename(form) -> str:
    return f"{sanitize_filename(form.title)}-responses.csv"
