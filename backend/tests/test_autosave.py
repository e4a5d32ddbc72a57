import random

from django.test import SimpleTestCase

from assessments.attempt import AttemptEngine
from assessments.autosave import AutosaveController, VISIBILITY
from tests.fakes import (
    TEST_ID, STUDENT_ID, FakeQuestionRepository, FakeSessionStore, FailingSessionStore, make_records,
)


def _started_engine():
    engine = AttemptEngine(TEST_ID, STUDENT_ID, 60, FakeQuestionRepository(make_records()),
                           rng=random.Random(5))
    return engine.start()


class TestAutosave(SimpleTestCase):
    def test_save_writes_snapshot(self):
        engine = _started_engine()
        store = FakeSessionStore()
        autosave = AutosaveController(engine, store)
        engine.select_answer('B')

        self.assertTrue(autosave.save())
        saved = store.get(TEST_ID, STUDENT_ID)
        self.assertEqual(saved.answers, {0: 'B'})
        self.assertEqual(saved.question_order, [q.id for q in engine.questions])
        self.assertEqual(engine.last_saved_at, saved.last_saved_at)

    def test_restore_reads_checkpoint(self):
        engine = _started_engine()
        store = FakeSessionStore()
        AutosaveController(engine, store).save()
        fresh = AttemptEngine(TEST_ID, STUDENT_ID, 60, FakeQuestionRepository(make_records()))
        self.assertIsNotNone(AutosaveController(fresh, store).restore())

    def test_failure_is_logged_not_raised(self):
        engine = _started_engine()
        autosave = AutosaveController(engine, FailingSessionStore())
        engine.select_answer('C')

        with self.assertLogs('assessments.autosave', level='ERROR') as logs:
            self.assertFalse(autosave.save(VISIBILITY))
        self.assertIn('visibility', logs.output[0])
        self.assertIsNone(engine.last_saved_at)
        self.assertEqual(engine.answers, {0: 'C'})

    def test_no_save_after_submit(self):
        engine = _started_engine()
        store = FakeSessionStore()
        engine.submit()
        engine.submit()
        self.assertFalse(AutosaveController(engine, store).save())
        self.assertEqual(store.writes, [])

    def test_discard(self):
        engine = _started_engine()
        store = FakeSessionStore()
        autosave = AutosaveController(engine, store)
        autosave.save()
        autosave.discard()
        self.assertIsNone(store.get(TEST_ID, STUDENT_ID))
