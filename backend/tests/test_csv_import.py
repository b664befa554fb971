import pytest

from quizroom.services.quiz.csv_import import parse_question_csv
from quizroom.services.quiz.errors import EmptyBank, InvalidQuestion


def test_parses_lines_into_question_items():
    text = (
        "Capital of France?,Berlin,Paris,Rome,Madrid,2\n"
        "\n"
        '  "Pick one, please", "A, B", C , D, E ,4  \r\n'
    )
    parsed = parse_question_csv(text)

    assert parsed == [
        {'title': 'Capital of France?', 'options': ['Berlin', 'Paris', 'Rome', 'Madrid'], 'correctOptionIndex': 1},
        {'title': 'Pick one, please', 'options': ['A, B', 'C', 'D', 'E'], 'correctOptionIndex': 3},
    ]


@pytest.mark.parametrize('text', ['', '   \n\n  '])
def test_empty_csv(text):
    with pytest.raises(EmptyBank):
        parse_question_csv(text)


def test_wrong_column_count_names_line():
    text = "Q1,a,b,c,d,1\nQ2,a,b,c,2\n"
    with pytest.raises(InvalidQuestion) as excinfo:
        parse_question_csv(text)
    assert excinfo.value.index == 2
    assert excinfo.value.field == 'columns'


@pytest.mark.parametrize('correct', ['0', '5', 'x', ''])
def test_correct_column_must_be_one_to_four(correct):
    with pytest.raises(InvalidQuestion) as excinfo:
        parse_question_csv(f"Q1,a,b,c,d,{correct}")
    assert excinfo.value.field == 'correctOptionIndex'
    assert excinfo.value.index == 1


def test_doubled_quotes_inside_quoted_field_are_literal():
    parsed = parse_question_csv('"Say ""hi""",a,b,c,d,1')
    assert parsed[0]['title'] == 'Say "hi"'
