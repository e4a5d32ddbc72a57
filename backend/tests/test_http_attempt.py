"""HTTP tests for the student attempt endpoints.

Covers: start/restore, test code validation, the practice -> main flow over
HTTP, client-reported time, checkpoint triggers, submission, duplicate
attempts and result lookup.
"""

from unittest.mock import patch

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from assessments.attempt import RESTORED_NOTICE
from assessments.models import AttemptCheckpoint, AttemptResult
from tests.helpers import authenticated_client, make_assessment, make_student, teacher_client


def _url(assessment, action=''):
    return f'/api/attempts/{assessment.id}/' + (f'{action}/' if action else '')


@override_settings(SECURE_SSL_REDIRECT=False)
class AttemptTestBase(TestCase):
    practice = 5

    def setUp(self):
        _, self.teacher = teacher_client()
        self.assessment = make_assessment(self.teacher, practice=self.practice)
        self.client, self.student = authenticated_client()

    def start(self, code='M12345'):
        return self.client.post('/api/attempts/start/', {'test_code': code}, format='json')

    def post(self, action, data=None):
        return self.client.post(_url(self.assessment, action), data or {}, format='json')

    def answer_phase(self, correct, count):
        """Answer *count* questions, the first *correct* of them with the right letter."""
        resp = None
        for i in range(count):
            self.post('answer', {'answer': 'A' if i < correct else 'B'})
            resp = self.post('next')
        return resp

    def checkpoint(self):
        return AttemptCheckpoint.objects.get(assessment=self.assessment, student=self.student)


class TestStartAttempt(AttemptTestBase):
    def test_start_new_attempt(self):
        resp = self.start()
        self.assertEqual(resp.status_code, 201)
        data = resp.json()
        self.assertEqual(data['phase'], 'practice')
        self.assertEqual(data['total_questions'], 5)
        self.assertEqual(data['current_question'], 0)
        self.assertEqual(data['time_remaining'], 3600)
        self.assertFalse(data['practice_complete'])
        self.assertIsNone(data['difficulty_level'])
        self.assertNotIn('correct_answer', data['question'])
        self.assertEqual(len(data['question']['options']), 4)

    def test_start_creates_checkpoint(self):
        self.start()
        checkpoint = self.checkpoint()
        self.assertEqual(checkpoint.time_remaining, 3600)
        self.assertEqual(len(checkpoint.question_order), 5)
        self.assertFalse(checkpoint.practice_complete)
        self.assertIsNotNone(checkpoint.last_saved_at)

    def test_lowercase_code_accepted(self):
        self.assertEqual(self.start(' m12345 ').status_code, 201)

    def test_second_start_restores(self):
        self.start()
        self.post('answer', {'answer': 'C'})
        self.post('next')
        resp = self.start()
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data['restored'])
        self.assertIn(RESTORED_NOTICE, data['notices'])
        self.assertEqual(data['current_question'], 1)
        self.assertEqual(data['answers'], {'0': 'C'})
        self.assertEqual(AttemptCheckpoint.objects.count(), 1)

    def test_empty_code(self):
        resp = self.start('')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()['error'], 'Please enter a test code')

    def test_wrong_length_code(self):
        resp = self.start('M123')
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()['error'], 'Test code must be 6 characters')

    def test_malformed_code(self):
        resp = self.start('X12345')
        self.assertEqual(resp.status_code, 400)

    def test_unknown_code(self):
        resp = self.start('M99999')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()['error'], 'Invalid test code')

    def test_inactive_assessment(self):
        self.assessment.is_active = False
        self.assessment.save()
        self.assertEqual(self.start().status_code, 404)

    def test_requires_student_token(self):
        resp = APIClient().post('/api/attempts/start/', {'test_code': 'M12345'}, format='json')
        self.assertIn(resp.status_code, (401, 403))

    def test_teacher_cannot_take_test(self):
        client, _ = teacher_client('other-teacher')
        resp = client.post('/api/attempts/start/', {'test_code': 'M12345'}, format='json')
        self.assertEqual(resp.status_code, 403)

    def test_no_main_questions_leaves_no_checkpoint(self):
        make_assessment(self.teacher, practice=5, easy=0, medium=0, hard=0, test_code='E00001',
                        subject='English')
        resp = self.start('E00001')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()['error'], 'No questions available for this test')
        self.assertFalse(AttemptCheckpoint.objects.exists())


class TestAttemptFlow(AttemptTestBase):
    def setUp(self):
        super().setUp()
        self.start()

    def test_practice_to_medium_to_result(self):
        resp = self.answer_phase(correct=3, count=5)
        data = resp.json()
        self.assertEqual(data['phase'], 'main')
        self.assertEqual(data['difficulty_level'], 'medium')
        self.assertEqual(data['practice_score'], 60)
        self.assertEqual(data['total_questions'], 10)
        self.assertEqual(data['answers'], {})
        self.assertIn('Practice complete! You scored 60%. Starting MEDIUM level test.', data['notices'])

        resp = self.answer_phase(correct=7, count=10)
        data = resp.json()
        self.assertEqual(data['phase'], 'submitted')
        self.assertEqual(data['result']['score'], 70)
        self.assertEqual(data['result']['difficulty_level'], 'medium')
        self.assertEqual(data['result']['practice_score'], 60)

        result = AttemptResult.objects.get(assessment=self.assessment, student=self.student)
        self.assertEqual(result.score, 70)
        self.assertEqual(result.correct_answers, 7)
        self.assertEqual(result.total_questions, 10)
        self.assertFalse(result.is_auto_submitted)
        self.assertFalse(AttemptCheckpoint.objects.exists())

        resp = self.client.get(f'/api/results/{self.assessment.id}/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['score'], 70)

    def test_every_action_checkpoints(self):
        self.post('answer', {'answer': 'd'})
        self.assertEqual(self.checkpoint().answers, {'0': 'D'})
        self.post('flag')
        self.assertEqual(self.checkpoint().marked_for_review, [0])
        self.post('jump', {'position': 4})
        self.assertEqual(self.checkpoint().current_question, 4)
        self.post('previous')
        self.assertEqual(self.checkpoint().current_question, 3)

    def test_get_does_not_write(self):
        before = self.checkpoint().last_saved_at
        resp = self.client.get(_url(self.assessment))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['phase'], 'practice')
        self.assertEqual(self.checkpoint().last_saved_at, before)

    def test_invalid_answer(self):
        resp = self.post('answer', {'answer': 'Z'})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.checkpoint().answers, {})

    def test_jump_out_of_range(self):
        self.assertEqual(self.post('jump', {'position': 5}).status_code, 400)
        self.assertEqual(self.post('jump', {'position': 'first'}).status_code, 400)

    def test_reported_time_is_adopted_and_never_increases(self):
        resp = self.post('answer', {'answer': 'A', 'time_remaining': 1000})
        self.assertEqual(resp.json()['time_remaining'], 1000)
        self.assertEqual(self.checkpoint().time_remaining, 1000)

        resp = self.post('next', {'time_remaining': 3000})
        self.assertEqual(resp.json()['time_remaining'], 1000)

    def test_invalid_reported_time(self):
        resp = self.post('next', {'time_remaining': 'soon'})
        self.assertEqual(resp.status_code, 400)

    def test_time_up_auto_submits(self):
        self.answer_phase(correct=5, count=5)
        resp = self.post('answer', {'answer': 'A', 'time_remaining': 0})
        data = resp.json()
        self.assertEqual(data['phase'], 'submitted')
        self.assertTrue(data['result']['is_auto_submitted'])
        self.assertEqual(data['result']['difficulty_level'], 'hard')
        result = AttemptResult.objects.get(student=self.student)
        self.assertTrue(result.is_auto_submitted)
        self.assertEqual(result.time_spent, 3600)

    def test_submit_in_practice_moves_to_main(self):
        resp = self.post('submit')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['phase'], 'main')
        self.assertEqual(resp.json()['difficulty_level'], 'easy')
        self.assertFalse(AttemptResult.objects.exists())

    def test_submit_twice(self):
        self.post('submit')
        resp = self.post('submit')
        self.assertEqual(resp.json()['phase'], 'submitted')
        resp = self.post('submit')
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(AttemptResult.objects.count(), 1)

    def test_cannot_restart_completed_test(self):
        self.post('submit')
        self.post('submit')
        resp = self.start()
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()['error'], 'You have already completed this test')

    def test_level_change_reported_on_next_action(self):
        self.answer_phase(correct=3, count=5)
        self.assessment.questions.filter(difficulty='medium').delete()

        resp = self.post('next')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['difficulty_level'], 'easy')
        self.assertIn('The medium level questions are no longer available. Continuing with a new EASY level test.',
                      data['notices'])
        self.assertEqual(self.checkpoint().difficulty_level, 'easy')

        resp = self.post('next')
        self.assertEqual(resp.json()['notices'], [])

    def test_start_racing_a_submit_does_not_reopen(self):
        self.post('submit')
        self.post('submit')
        self.assertEqual(AttemptResult.objects.count(), 1)

        with patch('assessments.stores.ResultStore.exists', side_effect=[False, True]):
            resp = self.start()
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(AttemptCheckpoint.objects.exists())

    def test_checkpoint_triggers(self):
        resp = self.post('checkpoint', {'trigger': 'visibility', 'time_remaining': 3500})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.checkpoint().time_remaining, 3500)

        resp = self.post('checkpoint', {'trigger': 'whenever'})
        self.assertEqual(resp.status_code, 400)

    def test_result_before_submit(self):
        resp = self.client.get(f'/api/results/{self.assessment.id}/')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()['error'], 'Test not submitted yet')

    def test_students_are_isolated(self):
        other_client, _ = authenticated_client(make_student('STU002', 'Other Student'))
        resp = other_client.post(_url(self.assessment, 'next'), {}, format='json')
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()['error'], 'No attempt in progress for this test')

    def test_result_store_failure_queues_retry(self):
        self.post('submit')
        with patch('assessments.stores.AttemptResult.objects.create', side_effect=RuntimeError('db down')), \
                patch('assessments.tasks.persist_result.delay') as delay:
            resp = self.post('submit')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['phase'], 'submitted')
        delay.assert_called_once()
        self.assertEqual(delay.call_args[0][0]['student_id'], str(self.student.id))
        self.assertFalse(AttemptCheckpoint.objects.exists())


class TestAttemptWithoutPractice(AttemptTestBase):
    practice = 0

    def test_starts_in_main(self):
        resp = self.start()
        data = resp.json()
        self.assertEqual(data['phase'], 'main')
        self.assertTrue(data['practice_complete'])
        self.assertEqual(data['difficulty_level'], 'easy')
        self.assertIsNone(data['practice_score'])
        self.assertIn('No practice questions found. Starting main test.', data['notices'])
