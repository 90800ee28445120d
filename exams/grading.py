"""
Answer grading: MCQ by option-id set equality, everything else left for manual review.

Pure functions only; never touches the database beyond reading a question's
already-loaded options. Unknown option ids are not an error here, they just
never match a correct option.
"""
from decimal import Decimal
from typing import Iterable, NamedTuple

from exams.models import Question

ZERO_POINTS = Decimal('0')


class Verdict(NamedTuple):
    is_correct: bool | None
    points_awarded: Decimal | None


PENDING_REVIEW = Verdict(None, None)


def _normalize_option_id(value):
    """12, "12" and " 12 " are the same id; non-numeric ids are kept as stripped strings."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    # str.isdigit also accepts superscripts and other non-ASCII digits
    if text.isascii() and text.isdigit():
        return int(text)
    return text


def option_id_set(values: Iterable | None) -> set:
    """Set of normalized option ids; blanks and None are dropped."""
    if not values:
        return set()
    result = set()
    for v in values:
        normalized = _normalize_option_id(v)
        if normalized is not None:
            result.add(normalized)
    return result


def normalize_option_ids(values: Iterable | None) -> list:
    """Sorted, de-duplicated list for storage (ints first, then strings)."""
    return sorted(option_id_set(values), key=lambda v: (isinstance(v, str), v))


def grade(question_type: str, points, correct_option_ids, selected_option_ids) -> Verdict:
    """
    MCQ: correct iff the selected set equals the correct set (both empty counts as equal).
    Full points or zero. Other types: Verdict(None, None).
    """
    if question_type not in Question.AUTO_GRADABLE_TYPES:
        return PENDING_REVIEW
    is_correct = option_id_set(correct_option_ids) == option_id_set(selected_option_ids)
    return Verdict(is_correct, Decimal(points) if is_correct else ZERO_POINTS)


def grade_answer(question: Question, selected_option_ids) -> Verdict:
    """Grade against a Question instance; prefetch `options` to avoid a query per call."""
    if not question.is_auto_gradable:
        return PENDING_REVIEW
    correct = [opt.id for opt in question.options.all() if opt.is_correct]
    return grade(question.type, question.points, correct, selected_option_ids)
