"""Django ORM implementations of the question, session and result stores."""

from django.db import transaction
from django.utils import timezone

from .models import Question, AttemptCheckpoint, AttemptResult
from .records import QuestionRecord, Checkpoint, Result


class QuestionRepository:

    def fetch_by_test(self, test_id):
        """All usable questions of an assessment, ordered, with passage fields."""
        questions = (
            Question.objects
            .filter(assessment_id=test_id)
            .select_related('passage')
            .order_by('order_index', 'created_at')
        )
        return _records(questions)

    def fetch_by_test_and_difficulty(self, test_id, difficulty):
        questions = (
            Question.objects
            .filter(assessment_id=test_id, difficulty=difficulty)
            .select_related('passage')
            .order_by('order_index', 'created_at')
        )
        return _records(questions)


class SessionStore:

    def get(self, test_id, student_id, lock=False):
        qs = AttemptCheckpoint.objects.filter(assessment_id=test_id, student_id=student_id)
        if lock:
            qs = qs.select_for_update()
        row = qs.first()
        if row is None:
            return None
        return Checkpoint(
            test_id=str(row.assessment_id),
            student_id=str(row.student_id),
            time_remaining=row.time_remaining,
            answers={int(k): v for k, v in (row.answers or {}).items()},
            current_question=row.current_question,
            marked_for_review=list(row.marked_for_review or []),
            difficulty_level=row.difficulty_level,
            practice_complete=row.practice_complete,
            practice_score=row.practice_score,
            question_order=list(row.question_order or []),
            last_saved_at=row.last_saved_at,
        )

    def upsert(self, checkpoint):
        AttemptCheckpoint.objects.update_or_create(
            assessment_id=checkpoint.test_id,
            student_id=checkpoint.student_id,
            defaults={
                'answers': {str(k): v for k, v in checkpoint.answers.items()},
                'question_order': list(checkpoint.question_order),
                'current_question': checkpoint.current_question,
                'time_remaining': checkpoint.time_remaining,
                'marked_for_review': sorted(checkpoint.marked_for_review),
                'difficulty_level': checkpoint.difficulty_level,
                'practice_complete': checkpoint.practice_complete,
                'practice_score': checkpoint.practice_score,
                'last_saved_at': checkpoint.last_saved_at or timezone.now(),
            },
        )

    def delete(self, test_id, student_id):
        AttemptCheckpoint.objects.filter(assessment_id=test_id, student_id=student_id).delete()


class ResultStore:

    def insert(self, result):
        with transaction.atomic():
            return AttemptResult.objects.create(
                assessment_id=result.test_id,
                student_id=result.student_id,
                score=result.score,
                correct_answers=result.correct_answers,
                wrong_answers=result.wrong_answers,
                total_questions=result.total_questions,
                difficulty_level=result.difficulty_level,
                practice_score=result.practice_score,
                time_spent=result.time_spent,
                answers={str(k): v for k, v in result.answers.items()},
                marked_for_review=list(result.marked_for_review),
                is_auto_submitted=result.is_auto_submitted,
                completed_at=result.completed_at,
            )

    def exists(self, test_id, student_id):
        return AttemptResult.objects.filter(assessment_id=test_id, student_id=student_id).exists()

    def get(self, test_id, student_id):
        row = AttemptResult.objects.filter(assessment_id=test_id, student_id=student_id).first()
        if row is None:
            return None
        return Result(
            test_id=str(row.assessment_id),
            student_id=str(row.student_id),
            score=row.score,
            correct_answers=row.correct_answers,
            wrong_answers=row.wrong_answers,
            total_questions=row.total_questions,
            difficulty_level=row.difficulty_level,
            practice_score=row.practice_score,
            time_spent=row.time_spent,
            answers={int(k): v for k, v in (row.answers or {}).items()},
            marked_for_review=list(row.marked_for_review or []),
            completed_at=row.completed_at,
            is_auto_submitted=row.is_auto_submitted,
        )


def _records(questions):
    records = []
    for question in questions:
        record = QuestionRecord.from_model(question)
        if record is not None:
            records.append(record)
    return records
