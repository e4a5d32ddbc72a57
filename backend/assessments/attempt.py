import logging

from django.utils import timezone

from . import difficulty as tiers
from .difficulty import assign_tier, first_available_tier
from .exceptions import InvalidAnswer, InvalidPosition, InvalidTransition, NoQuestionsAvailable
from .records import Checkpoint, Result
from .scoring import grade, normalize_answer
from .shuffler import shuffle

logger = logging.getLogger(__name__)

# Phases, in the only order they may be visited
LOADING = 'loading'
PRACTICE = 'practice'
MAIN = 'main'
SUBMITTED = 'submitted'

ACTIVE_PHASES = (PRACTICE, MAIN)

RESTORED_NOTICE = 'Session restored. Continuing where you left off.'
NO_PRACTICE_NOTICE = 'No practice questions found. Starting main test.'
LEVEL_CHANGED_NOTICE = 'The {old} level questions are no longer available. Continuing with a new {new} level test.'


class AttemptEngine:
    """Adaptive test delivery for one student taking one assessment.

    The attempt starts in ``loading``, moves to ``practice`` when the
    assessment has practice questions (otherwise straight to ``main``), and
    ends in ``submitted``. Finishing the practice set scores it, assigns the
    main tier once and loads that tier's questions in shuffled order.

    The engine holds no storage: questions come from *repository*, the
    finished Result is handed to *on_complete* exactly once, and checkpoints
    are taken with ``snapshot()`` by whoever persists them.
    """

    def __init__(self, test_id, student_id, duration_minutes, repository,
                 rng=None, on_complete=None, clock=None):
        self.test_id = str(test_id)
        self.student_id = str(student_id)
        self.duration_seconds = duration_minutes * 60
        self.repository = repository
        self.rng = rng
        self.on_complete = on_complete
        self.clock = clock or timezone.now

        self.phase = LOADING
        self.questions = []
        self.answers = {}
        self.position = 0
        self.flagged = set()
        self.time_remaining = self.duration_seconds
        self.practice_score = None
        self.last_saved_at = None
        self.restored = False
        self.result = None
        self.notices = []

        self._difficulty_level = None
        self._counts = {}
        self._finalized = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def difficulty_level(self):
        return self._difficulty_level

    def _set_difficulty_level(self, tier):
        if self._difficulty_level is not None:
            raise InvalidTransition('Difficulty level already assigned')
        self._difficulty_level = tier

    @property
    def is_active(self):
        return self.phase in ACTIVE_PHASES

    @property
    def practice_complete(self):
        return self.phase in (MAIN, SUBMITTED)

    @property
    def current_question(self):
        if not self.questions:
            return None
        return self.questions[self.position]

    @property
    def is_last_question(self):
        return self.position == len(self.questions) - 1

    def _require_active(self):
        if self.phase == LOADING:
            raise InvalidTransition('Attempt has not started')
        if self.phase == SUBMITTED:
            raise InvalidTransition('Attempt already submitted')

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def start(self, checkpoint=None):
        """Load questions and enter the first phase, restoring *checkpoint* if given.

        Raises NoQuestionsAvailable, leaving the engine in ``loading``, when
        no main tier has questions.
        """
        if self.phase != LOADING:
            raise InvalidTransition('Attempt already started')

        by_tier = {}
        for question in self.repository.fetch_by_test(self.test_id):
            by_tier.setdefault(question.difficulty, []).append(question)
        self._counts = {tier: len(by_tier.get(tier, ())) for tier in tiers.MAIN_TIERS}
        if not any(self._counts.values()):
            raise NoQuestionsAvailable()

        practice = by_tier.get(tiers.PRACTICE, [])
        if checkpoint is not None:
            self._restore(checkpoint, practice)
        elif practice:
            self.questions = shuffle(practice, self.rng)
            self.phase = PRACTICE
        else:
            self._enter_main(first_available_tier(self._counts).tier)
            self.notices.append(NO_PRACTICE_NOTICE)

        if self.time_remaining <= 0:
            self._expire()
        return self

    def _enter_main(self, tier):
        questions = self.repository.fetch_by_test_and_difficulty(self.test_id, tier)
        if not questions:
            raise NoQuestionsAvailable()
        self._set_difficulty_level(tier)
        self.questions = shuffle(questions, self.rng)
        self.answers = {}
        self.position = 0
        self.flagged = set()
        self.phase = MAIN

    def _restore(self, checkpoint, practice):
        self.time_remaining = max(0, min(self.duration_seconds, checkpoint.time_remaining))
        self.last_saved_at = checkpoint.last_saved_at
        self.restored = True
        self.notices.append(RESTORED_NOTICE)

        if checkpoint.practice_complete:
            tier = checkpoint.difficulty_level
            pool = []
            if tier in tiers.MAIN_TIERS:
                pool = self.repository.fetch_by_test_and_difficulty(self.test_id, tier)
            if not pool:
                self.practice_score = checkpoint.practice_score
                if self.practice_score is None:
                    assignment = first_available_tier(self._counts)
                else:
                    assignment = assign_tier(self.practice_score, self._counts)
                logger.warning('Test %s student %s: checkpoint tier %r has no questions, reassigned to %s',
                               self.test_id, self.student_id, tier, assignment.tier)
                self._enter_main(assignment.tier)
                self.notices.append(
                    LEVEL_CHANGED_NOTICE.format(old=tier or 'previous', new=assignment.tier.upper())
                )
                return
            self._set_difficulty_level(tier)
            self.practice_score = checkpoint.practice_score
            self.phase = MAIN
        else:
            pool = practice
            if not pool:
                logger.warning('Test %s: practice set is gone, starting main test', self.test_id)
                self._enter_main(first_available_tier(self._counts).tier)
                self.notices.append(NO_PRACTICE_NOTICE)
                return
            self.phase = PRACTICE

        keep_answers = True
        if checkpoint.question_order:
            ordered = _reorder(pool, checkpoint.question_order)
            if ordered is None:
                logger.warning('Test %s student %s: question set changed since checkpoint, answers discarded',
                               self.test_id, self.student_id)
                ordered = shuffle(pool, self.rng)
                keep_answers = False
        else:
            ordered = shuffle(pool, self.rng)
        self.questions = ordered

        last = len(self.questions) - 1
        self.position = min(max(checkpoint.current_question, 0), last)
        if keep_answers:
            for pos, letter in checkpoint.answers.items():
                letter = normalize_answer(letter)
                if 0 <= pos <= last and len(letter) == 1 and letter in self.questions[pos].letters:
                    self.answers[pos] = letter
            self.flagged = {pos for pos in checkpoint.marked_for_review if 0 <= pos <= last}

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def select_answer(self, letter):
        """Bind the current position to *letter*; selecting again overwrites."""
        self._require_active()
        letter = normalize_answer(letter)
        if len(letter) != 1 or letter not in self.current_question.letters:
            raise InvalidAnswer()
        self.answers[self.position] = letter

    def go_next(self):
        """Advance; on the last question finish practice or finalize the main test."""
        self._require_active()
        if not self.is_last_question:
            self.position += 1
            return None
        if self.phase == PRACTICE:
            self.complete_practice()
            return None
        return self._finalize(auto=False)

    def go_previous(self):
        self._require_active()
        if self.position > 0:
            self.position -= 1

    def jump_to(self, position):
        self._require_active()
        if not 0 <= position < len(self.questions):
            raise InvalidPosition()
        self.position = position

    def toggle_flag(self):
        self._require_active()
        if self.position in self.flagged:
            self.flagged.discard(self.position)
        else:
            self.flagged.add(self.position)

    def submit(self):
        """Explicit submit. Idempotent once the attempt has been finalized."""
        if self.phase == SUBMITTED:
            return self.result
        self._require_active()
        if self.phase == PRACTICE:
            self.complete_practice()
            return None
        return self._finalize(auto=False)

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------

    def tick(self, seconds=1):
        """Count down *seconds*; finalize when the clock reaches zero."""
        if not self.is_active or seconds <= 0:
            return
        self.time_remaining = max(0, self.time_remaining - seconds)
        if self.time_remaining == 0:
            self._expire()

    def sync_time(self, reported):
        """Adopt a client-reported time remaining. The clock never moves back up."""
        if reported is None:
            return
        self.tick(self.time_remaining - max(0, int(reported)))

    def _expire(self):
        logger.info('Test %s student %s: time expired in %s phase', self.test_id, self.student_id, self.phase)
        if self.phase == PRACTICE:
            self.complete_practice()
        return self._finalize(auto=True)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def complete_practice(self):
        """Score the practice set, assign the main tier and load its questions."""
        if self.phase != PRACTICE:
            raise InvalidTransition('Practice phase is not active')
        score = grade(self.questions, self.answers)['score']
        assignment = assign_tier(score, self._counts)
        self.practice_score = score
        self._enter_main(assignment.tier)

        note = f' ({assignment.target} not available)' if assignment.fell_back else ''
        self.notices.append(
            f'Practice complete! You scored {score}%. Starting {assignment.tier.upper()} level test{note}.'
        )
        logger.info('Test %s student %s: practice %d%% -> %s (target %s)',
                    self.test_id, self.student_id, score, assignment.tier, assignment.target)
        return assignment

    def _finalize(self, auto):
        if self._finalized:
            return self.result
        self._finalized = True

        outcome = grade(self.questions, self.answers)
        self.result = Result(
            test_id=self.test_id,
            student_id=self.student_id,
            score=outcome['score'],
            correct_answers=outcome['correct'],
            wrong_answers=outcome['wrong'],
            total_questions=outcome['total'],
            difficulty_level=self._difficulty_level,
            practice_score=self.practice_score,
            time_spent=self.duration_seconds - self.time_remaining,
            answers=dict(self.answers),
            marked_for_review=sorted(self.flagged),
            completed_at=self.clock(),
            is_auto_submitted=auto,
        )
        self.phase = SUBMITTED
        logger.info('Test %s student %s: submitted%s with score %d%%',
                    self.test_id, self.student_id, ' (auto)' if auto else '', self.result.score)

        if self.on_complete is not None:
            self.on_complete(self.result)
        return self.result

    # ------------------------------------------------------------------
    # Persistence / presentation
    # ------------------------------------------------------------------

    def snapshot(self):
        if not self.is_active:
            raise InvalidTransition('Only an active attempt can be checkpointed')
        return Checkpoint(
            test_id=self.test_id,
            student_id=self.student_id,
            time_remaining=self.time_remaining,
            answers=dict(self.answers),
            current_question=self.position,
            marked_for_review=sorted(self.flagged),
            difficulty_level=self._difficulty_level,
            practice_complete=self.practice_complete,
            practice_score=self.practice_score,
            question_order=[q.id for q in self.questions],
            last_saved_at=self.clock(),
        )

    def drain_notices(self):
        notices, self.notices = self.notices, []
        return notices

    def state(self):
        question = self.current_question if self.is_active else None
        return {
            'test_id': self.test_id,
            'phase': self.phase,
            'practice_complete': self.practice_complete,
            'difficulty_level': self._difficulty_level if self.practice_complete else None,
            'practice_score': self.practice_score,
            'time_remaining': self.time_remaining,
            'current_question': self.position,
            'total_questions': len(self.questions),
            'is_last_question': self.is_active and self.is_last_question,
            'question': question.public_dict() if question else None,
            'selected_answer': self.answers.get(self.position) if question else None,
            'answers': {str(k): v for k, v in sorted(self.answers.items())},
            'marked_for_review': sorted(self.flagged),
            'restored': self.restored,
        }


def _reorder(pool, question_order):
    """Arrange *pool* in checkpoint order, or None if the question set changed."""
    by_id = {q.id: q for q in pool}
    if set(by_id) != set(question_order) or len(question_order) != len(pool):
        return None
    return [by_id[qid] for qid in question_order]
