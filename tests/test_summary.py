import itertools

from conftest import make_form, make_response
from formdesk.services.summary import summarize

QUESTIONS = [
    {"id": "q1", "text": "Comments", "type": "text", "options": [], "required": True, "order": 1},
    {"id": "q2", "text": "Rating", "type": "single-choice", "options": ["Good", "Fair", "Bad"],
     "required": False, "order": 2},
]


def sample_responses():
    return [
        make_response([("q1", "Comments", "text", "Lovely"), ("q2", "Rating", "single-choice", "Bad")], 1),
        make_response([("q1", "Comments", "text", "Fine"), ("q2", "Rating", "single-choice", "Good")], 2),
        make_response([("q1", "Comments", "text", "Meh"), ("q2", "Rating", "single-choice", "")], 3),
        make_response([("q1", "Comments", "text", "Great"), ("q2", "Rating", "single-choice", "Good")], 4),
    ]


def test_empty_responses_give_zero_counts():
    summary = summarize(make_form(QUESTIONS), [])

    assert summary.total_responses == 0
    assert [q.total_answers for q in summary.questions] == [0, 0]
    assert all(q.answer_tally == {} for q in summary.questions)


def test_counts_and_tally():
    summary = summarize(make_form(QUESTIONS), sample_responses())

    assert summary.total_responses == 4
    comments, rating = summary.questions
    assert comments.question_id == "q1"
    assert comments.total_answers == 4
    assert comments.answer_tally == {}

    assert rating.question_type.value == "single-choice"
    # The skipped optional answer is not counted
    assert rating.total_answers == 3
    assert rating.answer_tally == {"Good": 2, "Bad": 1}
    assert list(rating.answer_tally) == ["Good", "Bad"]


def test_one_entry_per_question_in_form_order():
    reordered = [QUESTIONS[1], QUESTIONS[0]]
    summary = summarize(make_form(reordered), sample_responses())
    assert [q.question_id for q in summary.questions] == ["q2", "q1"]


def test_output_is_independent_of_response_order():
    form = make_form(QUESTIONS)
    responses = sample_responses()
    expected = summarize(form, responses).model_dump_json()

    assert summarize(form, responses).model_dump_json() == expected
    for permutation in itertools.permutations(responses):
        assert summarize(form, list(permutation)).model_dump_json() == expected


def test_stale_options_after_edit_are_kept_after_current_ones():
    edited = [dict(QUESTIONS[1], options=["Good", "Bad"])]
    responses = [
        make_response([("q2", "Rating", "single-choice", "Fair")], 1),
        make_response([("q2", "Rating", "single-choice", "Bad")], 2),
        make_response([("q2", "Rating", "single-choice", "Average")], 3),
    ]
    summary = summarize(make_form(edited), responses)

    assert list(summary.questions[0].answer_tally.items()) == [("Bad", 1), ("Average", 1), ("Fair", 1)]


def test_answers_to_removed_questions_are_ignored():
    form = make_form([QUESTIONS[0]])
    responses = [make_response([("q1", "Comments", "text", "Hi"), ("old", "Removed", "text", "x")])]
    summary = summarize(form, responses)

    assert summary.total_responses == 1
    assert len(summary.questions) == 1
    assert summary.questions[0].total_answers == 1
