"""In-memory stand-ins for the question, session and result stores."""

import uuid

from assessments.records import QuestionRecord

TEST_ID = str(uuid.UUID(int=1))
STUDENT_ID = str(uuid.UUID(int=2))


def make_records(test_id=TEST_ID, practice=5, easy=10, medium=10, hard=10, correct='A'):
    """Question records per tier, four options each, all keyed to *correct*."""
    records = []
    for tier, count in (('practice', practice), ('easy', easy), ('medium', medium), ('hard', hard)):
        for i in range(count):
            records.append(QuestionRecord(
                id=f'{tier}-{i}',
                test_id=test_id,
                difficulty=tier,
                question_text=f'{tier.title()} question {i + 1}',
                options=('Option A', 'Option B', 'Option C', 'Option D'),
                correct_answer=correct,
                order_index=i,
            ))
    return records


class FakeQuestionRepository:

    def __init__(self, records=()):
        self.records = list(records)
        self.fail = False

    def fetch_by_test(self, test_id):
        if self.fail:
            raise ConnectionError('question store unavailable')
        return [r for r in self.records if r.test_id == str(test_id)]

    def fetch_by_test_and_difficulty(self, test_id, difficulty):
        return [r for r in self.fetch_by_test(test_id) if r.difficulty == difficulty]


class FakeSessionStore:

    def __init__(self, checkpoint=None):
        self.checkpoints = {}
        self.writes = []
        if checkpoint is not None:
            self.checkpoints[(checkpoint.test_id, checkpoint.student_id)] = checkpoint

    def get(self, test_id, student_id, lock=False):
        return self.checkpoints.get((str(test_id), str(student_id)))

    def upsert(self, checkpoint):
        self.writes.append(checkpoint)
        self.checkpoints[(checkpoint.test_id, checkpoint.student_id)] = checkpoint

    def delete(self, test_id, student_id):
        self.checkpoints.pop((str(test_id), str(student_id)), None)


class FailingSessionStore(FakeSessionStore):

    def upsert(self, checkpoint):
        raise ConnectionError('session store unavailable')


class FakeResultStore:

    def __init__(self):
        self.results = []

    def insert(self, result):
        self.results.append(result)

    def exists(self, test_id, student_id):
        return any(r.test_id == str(test_id) and r.student_id == str(student_id) for r in self.results)


def wrong_letter(question):
    return next(letter for letter in question.letters if letter != question.correct_answer)


def answer_all(engine, correct):
    """Answer every question of the current phase, the first *correct* of them right."""
    for i in range(len(engine.questions)):
        question = engine.current_question
        engine.select_answer(question.correct_answer if i < correct else wrong_letter(question))
        engine.go_next()
