"""Plain records passed between the attempt engine and the stores.

The engine never sees Django models: stores convert rows into these records
at the boundary, which is also where question data is validated.
"""

import logging
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from django.utils.dateparse import parse_datetime

from . import difficulty as tiers
from .scoring import normalize_answer

logger = logging.getLogger(__name__)

OPTION_LETTERS = string.ascii_uppercase
MEDIA_TYPES = ('image', 'audio', 'video')


def option_letters(count):
    return OPTION_LETTERS[:count]


@dataclass(frozen=True)
class QuestionRecord:
    id: str
    test_id: str
    difficulty: str
    question_text: str
    options: Tuple[str, ...]
    correct_answer: str
    marks: int = 1
    order_index: int = 0
    question_type: str = 'mcq'
    passage_id: Optional[str] = None
    passage_title: str = ''
    passage_text: str = ''
    media_url: str = ''
    media_type: str = ''

    @property
    def letters(self):
        return option_letters(len(self.options))

    @classmethod
    def from_model(cls, question):
        """Build a record from a Question row, or return None if the row is unusable."""
        options = question.options or []
        if question.difficulty not in (tiers.PRACTICE,) + tiers.MAIN_TIERS:
            logger.warning('Skipping question %s: unknown difficulty %r', question.id, question.difficulty)
            return None
        if len(options) < 2 or not all(isinstance(o, str) for o in options):
            logger.warning('Skipping question %s: needs at least two text options', question.id)
            return None
        correct = normalize_answer(question.correct_answer)[:1]
        if not correct or correct not in option_letters(len(options)):
            logger.warning('Skipping question %s: correct answer %r is not an option',
                           question.id, question.correct_answer)
            return None

        passage = question.passage
        media_type = question.media_type if question.media_type in MEDIA_TYPES else ''
        return cls(
            id=str(question.id),
            test_id=str(question.assessment_id),
            difficulty=question.difficulty,
            question_text=question.question_text,
            options=tuple(options),
            correct_answer=correct,
            marks=question.marks,
            order_index=question.order_index,
            question_type=question.question_type,
            passage_id=str(passage.id) if passage else None,
            passage_title=passage.title if passage else '',
            passage_text=passage.content if passage else '',
            media_url=question.media_url if media_type else '',
            media_type=media_type,
        )

    def public_dict(self):
        """Question as shown to a student: no correct answer."""
        return {
            'id': self.id,
            'question_type': self.question_type,
            'question_text': self.question_text,
            'options': [
                {'letter': letter, 'text': text}
                for letter, text in zip(self.letters, self.options)
            ],
            'marks': self.marks,
            'passage': {
                'id': self.passage_id,
                'title': self.passage_title,
                'text': self.passage_text,
            } if self.passage_id else None,
            'media': {
                'url': self.media_url,
                'type': self.media_type,
            } if self.media_url else None,
        }


@dataclass
class Checkpoint:
    """Serializable snapshot of an attempt, keyed by (test_id, student_id)."""

    test_id: str
    student_id: str
    time_remaining: int
    answers: Dict[int, str] = field(default_factory=dict)
    current_question: int = 0
    marked_for_review: List[int] = field(default_factory=list)
    difficulty_level: Optional[str] = None
    practice_complete: bool = False
    practice_score: Optional[int] = None
    question_order: List[str] = field(default_factory=list)
    last_saved_at: Optional[datetime] = None

    def to_dict(self):
        return {
            'answers': {str(k): v for k, v in self.answers.items()},
            'currentQuestion': self.current_question,
            'timeRemaining': self.time_remaining,
            'markedForReview': sorted(self.marked_for_review),
            'difficultyLevel': self.difficulty_level,
            'practiceComplete': self.practice_complete,
            'practiceScore': self.practice_score,
            'questionOrder': list(self.question_order),
            'lastSavedAt': self.last_saved_at.isoformat() if self.last_saved_at else None,
        }

    @classmethod
    def from_dict(cls, test_id, student_id, data):
        last_saved = data.get('lastSavedAt')
        if isinstance(last_saved, str):
            last_saved = parse_datetime(last_saved)
        return cls(
            test_id=str(test_id),
            student_id=str(student_id),
            time_remaining=int(data['timeRemaining']),
            answers=_int_keys(data.get('answers') or {}),
            current_question=int(data.get('currentQuestion') or 0),
            marked_for_review=[int(p) for p in data.get('markedForReview') or []],
            difficulty_level=data.get('difficultyLevel'),
            practice_complete=bool(data.get('practiceComplete')),
            practice_score=data.get('practiceScore'),
            question_order=[str(q) for q in data.get('questionOrder') or []],
            last_saved_at=last_saved,
        )


@dataclass(frozen=True)
class Result:
    test_id: str
    student_id: str
    score: int
    correct_answers: int
    wrong_answers: int
    total_questions: int
    difficulty_level: Optional[str]
    practice_score: Optional[int]
    time_spent: int
    answers: Dict[int, str]
    marked_for_review: List[int]
    completed_at: datetime
    is_auto_submitted: bool = False

    def to_dict(self):
        return {
            'test_id': self.test_id,
            'student_id': self.student_id,
            'score': self.score,
            'correct_answers': self.correct_answers,
            'wrong_answers': self.wrong_answers,
            'total_questions': self.total_questions,
            'difficulty_level': self.difficulty_level,
            'practice_score': self.practice_score,
            'time_spent': self.time_spent,
            'answers': {str(k): v for k, v in self.answers.items()},
            'marked_for_review': list(self.marked_for_review),
            'is_auto_submitted': self.is_auto_submitted,
            'completed_at': self.completed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data):
        completed_at = data['completed_at']
        if isinstance(completed_at, str):
            completed_at = parse_datetime(completed_at)
        return cls(
            test_id=data['test_id'],
            student_id=data['student_id'],
            score=data['score'],
            correct_answers=data['correct_answers'],
            wrong_answers=data['wrong_answers'],
            total_questions=data['total_questions'],
            difficulty_level=data.get('difficulty_level'),
            practice_score=data.get('practice_score'),
            time_spent=data['time_spent'],
            answers=_int_keys(data.get('answers') or {}),
            marked_for_review=list(data.get('marked_for_review') or []),
            completed_at=completed_at,
            is_auto_submitted=data.get('is_auto_submitted', False),
        )


def _int_keys(mapping):
    return {int(k): v for k, v in mapping.items()}
