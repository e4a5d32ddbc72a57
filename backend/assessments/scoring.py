from .exceptions import EmptyQuestionSet


def normalize_answer(text):
    """Normalize an answer letter for comparison: strip and uppercase."""
    if text is None:
        return ''
    return str(text).strip().upper()


def grade(questions, answers):
    """Grade a presented question list against a position -> letter map.

    Returns a dict with correct, wrong, total and score (rounded percent).
    Unanswered positions count as wrong. Raises EmptyQuestionSet for an empty
    list instead of producing a NaN score.
    """
    total = len(questions)
    if total == 0:
        raise EmptyQuestionSet()

    correct = 0
    for position, question in enumerate(questions):
        submitted = answers.get(position)
        if submitted is not None and normalize_answer(submitted) == question.correct_answer:
            correct += 1

    return {
        'correct': correct,
        'wrong': total - correct,
        'total': total,
        'score': percent(correct, total),
    }


def percent(part, whole):
    """Integer percentage rounded half up (62.5 -> 63), not to even."""
    return (part * 200 + whole) // (2 * whole)
