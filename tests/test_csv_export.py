import csv
import io
import re
from datetime import datetime, timezone

from conftest import make_form, make_response
from formdesk.services.csv_export import METADATA_COLUMNS, export_filename, export_responses_csv
from formdesk.utils.helpers import format_datetime, generate_public_slug, sanitize_filename

QUESTIONS = [
    {"id": "q1", "text": "Comments", "type": "text", "options": [], "required": True, "order": 1},
    {"id": "q2", "text": "Rating", "type": "single-choice", "options": ["Good", "Bad"],
     "required": False, "order": 2},
]


def read_rows(text):
    return list(csv.reader(io.StringIO(text)))


def test_header_and_rows():
    submitted = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    responses = [
        make_response(
            [("q1", "Comments", "text", "Tasty, warm"), ("q2", "Rating", "single-choice", "Good")],
            7,
            submitter_email="a@x.com",
            submitter_name="Ann",
            ip_address="10.0.0.1",
            submitted_at=submitted,
        ),
        make_response([("q1", "Comments", "text", "Cold"), ("q2", "Rating", "single-choice", "")], 8),
    ]
    rows = read_rows(export_responses_csv(make_form(QUESTIONS), responses))

    assert rows[0] == METADATA_COLUMNS + ["Comments", "Rating"]
    assert rows[1] == ["7", submitted.isoformat(), "a@x.com", "Ann", "10.0.0.1", "Tasty, warm", "Good"]
    assert rows[2] == ["8", "", "", "", "", "Cold", ""]


def test_columns_follow_current_form_and_keep_removed_questions():
    form = make_form([dict(QUESTIONS[1], text="Overall rating"), QUESTIONS[0]])
    responses = [
        make_response([("q1", "Comments", "text", "Hi"), ("q2", "Rating", "single-choice", "Bad"),
                       ("old", "Visit again?", "text", "Yes")], 1),
    ]
    rows = read_rows(export_responses_csv(form, responses))

    assert rows[0][len(METADATA_COLUMNS):] == ["Overall rating", "Comments", "Visit again?"]
    assert rows[1][len(METADATA_COLUMNS):] == ["Bad", "Hi", "Yes"]


def test_export_filename_is_header_safe():
    form = make_form(QUESTIONS)
    form.title = 'Café "Survey" / 2024'
    assert export_filename(form) == "Caf Survey  2024-responses.csv"


def test_sanitize_filename_never_empty():
    assert sanitize_filename("???") == "form"


def test_format_datetime_treats_naive_values_as_utc():
    assert format_datetime(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05+00:00"
    assert format_datetime(None) is None


def test_public_slug_format_and_uniqueness():
    slugs = {generate_public_slug() for _ in range(50)}
    assert len(slugs) == 50
    for slug in slugs:
        assert re.fullmatch(r"form-\d{13,}-[a-z0-9]{9}", slug)
