from django.test import SimpleTestCase

from assessments.exceptions import EmptyQuestionSet
from assessments.scoring import grade, normalize_answer, percent
from tests.fakes import make_records


class TestPercent(SimpleTestCase):
    def test_exact_percent(self):
        self.assertEqual(percent(7, 10), 70)
        self.assertEqual(percent(3, 5), 60)

    def test_rounds_half_up(self):
        self.assertEqual(percent(5, 8), 63)    # 62.5
        self.assertEqual(percent(1, 8), 13)    # 12.5

    def test_thirds(self):
        self.assertEqual(percent(1, 3), 33)
        self.assertEqual(percent(2, 3), 67)

    def test_bounds(self):
        self.assertEqual(percent(0, 4), 0)
        self.assertEqual(percent(4, 4), 100)


class TestNormalizeAnswer(SimpleTestCase):
    def test_strips_and_uppercases(self):
        self.assertEqual(normalize_answer('  b '), 'B')

    def test_none_is_empty(self):
        self.assertEqual(normalize_answer(None), '')


class TestGrade(SimpleTestCase):
    def setUp(self):
        self.questions = make_records(practice=0, easy=10, medium=0, hard=0)

    def test_seven_of_ten(self):
        answers = {i: 'A' for i in range(7)}
        answers.update({7: 'B', 8: 'C', 9: 'D'})
        outcome = grade(self.questions, answers)
        self.assertEqual(outcome, {'correct': 7, 'wrong': 3, 'total': 10, 'score': 70})

    def test_unanswered_count_as_wrong(self):
        outcome = grade(self.questions, {0: 'A', 1: 'A'})
        self.assertEqual(outcome['correct'], 2)
        self.assertEqual(outcome['wrong'], 8)
        self.assertEqual(outcome['score'], 20)

    def test_answers_compared_case_insensitively(self):
        outcome = grade(self.questions[:2], {0: 'a', 1: ' A '})
        self.assertEqual(outcome['score'], 100)

    def test_empty_question_set_raises(self):
        with self.assertRaises(EmptyQuestionSet):
            grade([], {})
