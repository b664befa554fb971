"""Question bank construction and validation."""

from typing import Any, List, Mapping, Sequence

from quizroom.models import OPTION_IDS, Option, Question, StoredQuestion
from .errors import EmptyBank, InvalidQuestion

DEFAULT_DURATION_MS = 120000


def default_question_bank(duration_ms: int = DEFAULT_DURATION_MS) -> List[StoredQuestion]:
    """Single-question fallback so a fresh room is always playable."""
    return [
        StoredQuestion(
            question=Question(
                question_id='q1',
                title='Which language runs in the browser by default?',
                options=_build_options(['Java', 'JavaScript', 'Python', 'Rust']),
                duration_ms=duration_ms,
            ),
            correct_option_id='b',
        )
    ]


def _build_options(texts: Sequence[str]):
    return tuple(
        Option(option_id=OPTION_IDS[i], text=text, index=i)
        for i, text in enumerate(texts)
    )


def _validate_item(position: int, raw: Any):
    if not isinstance(raw, Mapping):
        raise InvalidQuestion(position, 'question')

    title = raw.get('title')
    if not isinstance(title, str) or not title.strip():
        raise InvalidQuestion(position, 'title')

    options = raw.get('options')
    if not isinstance(options, (list, tuple)) or len(options) != len(OPTION_IDS):
        raise InvalidQuestion(position, 'options')
    texts = []
    for opt in options:
        if not isinstance(opt, str) or not opt.strip():
            raise InvalidQuestion(position, 'options')
        texts.append(opt.strip())

    correct = raw.get('correctOptionIndex')
    # bool is an int subclass; reject it explicitly
    if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct < len(OPTION_IDS):
        raise InvalidQuestion(position, 'correctOptionIndex')

    return title.strip(), texts, correct


def build_question_bank(raw_questions: Sequence[Any], duration_ms: int = DEFAULT_DURATION_MS) -> List[StoredQuestion]:
    """Validate raw `{title, options, correctOptionIndex}` items into a bank.

    Raises EmptyBank for an empty input and InvalidQuestion (1-based index)
    for the first offending item. Nothing is returned unless every item is
    valid, so callers can swap the result in atomically.
    """
    if not raw_questions:
        raise EmptyBank()

    bank = []
    for idx, raw in enumerate(raw_questions):
        position = idx + 1
        title, texts, correct = _validate_item(position, raw)
        bank.append(StoredQuestion(
            question=Question(
                question_id=f'q_{position}',
                title=title,
                options=_build_options(texts),
                duration_ms=duration_ms,
            ),
            correct_option_id=OPTION_IDS[correct],
        ))
    return bank
