import logging
import random
import re
import string

from .attempt import AttemptEngine, RESTORED_NOTICE
from .autosave import AutosaveController, START
from .exceptions import AlreadyCompleted, AssessmentNotFound, AttemptNotFound, InvalidTestCode
from .models import Assessment
from .stores import QuestionRepository, SessionStore, ResultStore

logger = logging.getLogger(__name__)

TEST_CODE_LENGTH = 6
SUBJECT_PREFIXES = {
    Assessment.Subject.ENGLISH: 'E',
    Assessment.Subject.SCIENCE: 'S',
    Assessment.Subject.MATHEMATICS: 'M',
}
CODE_CHARS = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 20

_TEST_CODE_RE = re.compile(r'^[%s][A-Z0-9]{5}$' % ''.join(SUBJECT_PREFIXES.values()))


def normalize_test_code(raw):
    """Validate a student-entered test code and return it upper-cased."""
    code = raw.strip().upper() if isinstance(raw, str) else ''
    if not code:
        raise InvalidTestCode('Please enter a test code')
    if len(code) != TEST_CODE_LENGTH:
        raise InvalidTestCode('Test code must be 6 characters')
    if not _TEST_CODE_RE.match(code):
        raise InvalidTestCode('Test code must be a subject letter followed by 5 letters or digits')
    return code


def generate_test_code(subject, rng=None):
    """Draw an unused test code: subject prefix plus 5 random characters."""
    rng = rng or random
    prefix = SUBJECT_PREFIXES.get(subject, 'M')
    for _ in range(MAX_CODE_ATTEMPTS):
        code = prefix + ''.join(rng.choice(CODE_CHARS) for _ in range(TEST_CODE_LENGTH - 1))
        if not Assessment.objects.filter(test_code=code).exists():
            return code
    raise RuntimeError(f'Could not find a free test code after {MAX_CODE_ATTEMPTS} attempts')


class AttemptService:
    """Connects attempt engines to the question, session and result stores."""

    def __init__(self, questions=None, sessions=None, results=None, rng=None, clock=None):
        self.questions = questions if questions is not None else QuestionRepository()
        self.sessions = sessions if sessions is not None else SessionStore()
        self.results = results if results is not None else ResultStore()
        self.rng = rng
        self.clock = clock

    def find_assessment(self, test_code):
        code = normalize_test_code(test_code)
        assessment = Assessment.objects.filter(test_code=code, is_active=True).first()
        if assessment is None:
            raise AssessmentNotFound()
        return assessment

    def open(self, test_code, student_id):
        """Start or restore the student's attempt at the assessment behind *test_code*."""
        return self.open_for(self.find_assessment(test_code), student_id)

    def open_for(self, assessment, student_id):
        """Returns ``(engine, created)``; *created* is False when a checkpoint was restored."""
        if self.results.exists(assessment.id, student_id):
            raise AlreadyCompleted()

        engine = self._engine(assessment, student_id)
        autosave = AutosaveController(engine, self.sessions)
        checkpoint = autosave.restore(lock=True)
        # A submit holding the lock may have stored the result and dropped the row meanwhile
        if checkpoint is None and self.results.exists(assessment.id, student_id):
            raise AlreadyCompleted()
        engine.start(checkpoint)
        if checkpoint is None:
            logger.info('Student %s opened test %s in %s phase', student_id, assessment.test_code, engine.phase)
        else:
            logger.info('Student %s restored test %s at Q%d', student_id, assessment.test_code,
                        engine.position + 1)
        autosave.save(START)
        return engine, checkpoint is None

    def resume(self, assessment, student_id, lock=False):
        """Rebuild the student's in-progress attempt from its checkpoint."""
        engine = self._engine(assessment, student_id)
        autosave = AutosaveController(engine, self.sessions)
        checkpoint = autosave.restore(lock=lock)
        if checkpoint is None:
            if self.results.exists(assessment.id, student_id):
                raise AlreadyCompleted()
            raise AttemptNotFound()
        engine.start(checkpoint)
        engine.restored = False
        engine.notices = [n for n in engine.notices if n != RESTORED_NOTICE]
        return engine, autosave

    def complete(self, result):
        """Store a finished attempt's Result and drop its checkpoint."""
        try:
            self.results.insert(result)
        except Exception:
            logger.exception('Failed to store result for test %s student %s, queuing retry',
                             result.test_id, result.student_id)
            from .tasks import persist_result
            persist_result.delay(result.to_dict())

        try:
            self.sessions.delete(result.test_id, result.student_id)
        except Exception:
            logger.exception('Failed to delete checkpoint for test %s student %s',
                             result.test_id, result.student_id)

    def _engine(self, assessment, student_id):
        return AttemptEngine(
            test_id=assessment.id,
            student_id=student_id,
            duration_minutes=assessment.duration_minutes,
            repository=self.questions,
            rng=self.rng,
            on_complete=self.complete,
            clock=self.clock,
        )
