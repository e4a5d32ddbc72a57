import uuid

from django.contrib.auth.models import User
from django.db import models

from . import difficulty as tiers


class Assessment(models.Model):
    class Subject(models.TextChoices):
        ENGLISH = 'English', 'English'
        SCIENCE = 'Science', 'Science'
        MATHEMATICS = 'Mathematics', 'Mathematics'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    subject = models.CharField(max_length=20, choices=Subject.choices)
    description = models.TextField(blank=True, default='')
    test_code = models.CharField(max_length=6, unique=True)
    duration_minutes = models.IntegerField(default=60, help_text="Duration in minutes")
    is_active = models.BooleanField(default=True)
    target_grade = models.CharField(max_length=20, blank=True, default='')
    target_section = models.CharField(max_length=20, blank=True, default='')
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='assessments')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.test_code} - {self.title}"


class Passage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assessment = models.ForeignKey(Assessment, on_delete=models.CASCADE, related_name='passages')
    passage_code = models.CharField(max_length=50)
    title = models.CharField(max_length=255, blank=True, default='')
    content = models.TextField()
    passage_type = models.CharField(max_length=50, blank=True, default='')
    media_url = models.URLField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.passage_code}: {self.title}"


class Question(models.Model):
    class QuestionType(models.TextChoices):
        MCQ = 'mcq', 'Multiple choice'

    class Difficulty(models.TextChoices):
        PRACTICE = tiers.PRACTICE, 'Practice'
        EASY = tiers.EASY, 'Easy'
        MEDIUM = tiers.MEDIUM, 'Medium'
        HARD = tiers.HARD, 'Hard'

    class MediaType(models.TextChoices):
        IMAGE = 'image', 'Image'
        AUDIO = 'audio', 'Audio'
        VIDEO = 'video', 'Video'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assessment = models.ForeignKey(Assessment, on_delete=models.CASCADE, related_name='questions')
    passage = models.ForeignKey(
        Passage, on_delete=models.SET_NULL, null=True, blank=True, related_name='questions',
    )
    question_type = models.CharField(max_length=10, choices=QuestionType.choices, default=QuestionType.MCQ)
    difficulty = models.CharField(max_length=10, choices=Difficulty.choices, default=Difficulty.MEDIUM)
    question_text = models.TextField()
    options = models.JSONField(default=list, help_text="Option texts in display order: A, B, C, ...")
    correct_answer = models.CharField(max_length=1, help_text="Letter of the correct option")
    marks = models.IntegerField(default=1)
    order_index = models.IntegerField(default=0)
    media_url = models.URLField(max_length=500, blank=True, default='')
    media_type = models.CharField(max_length=10, choices=MediaType.choices, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['order_index', 'created_at']
        indexes = [
            models.Index(fields=['assessment', 'difficulty'], name='question_tier_idx'),
        ]

    def __str__(self):
        return f"[{self.difficulty}] {self.question_text[:60]}"


class Student(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    full_name = models.CharField(max_length=255)
    student_code = models.CharField(max_length=50, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Read by DRF's user throttle once the student is request.user
    @property
    def is_authenticated(self):
        return True

    def __str__(self):
        return self.full_name


class AttemptCheckpoint(models.Model):
    """Persisted snapshot of an in-progress attempt, one per (assessment, student)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assessment = models.ForeignKey(Assessment, on_delete=models.CASCADE, related_name='checkpoints')
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='checkpoints')
    answers = models.JSONField(default=dict, blank=True)
    question_order = models.JSONField(default=list, blank=True)
    current_question = models.IntegerField(default=0)
    time_remaining = models.IntegerField(help_text="Seconds")
    marked_for_review = models.JSONField(default=list, blank=True)
    difficulty_level = models.CharField(max_length=10, null=True, blank=True)
    practice_complete = models.BooleanField(default=False)
    practice_score = models.IntegerField(null=True, blank=True)
    started_at = models.DateTimeField(auto_now_add=True)
    last_saved_at = models.DateTimeField(null=True, blank=True, db_index=True)

    class Meta:
        unique_together = ('assessment', 'student')

    def __str__(self):
        return f"{self.student} - {self.assessment.test_code} (Q{self.current_question + 1})"


class AttemptResult(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assessment = models.ForeignKey(Assessment, on_delete=models.CASCADE, related_name='results')
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='results')
    score = models.IntegerField()
    correct_answers = models.IntegerField()
    wrong_answers = models.IntegerField()
    total_questions = models.IntegerField()
    difficulty_level = models.CharField(max_length=10, null=True, blank=True)
    practice_score = models.IntegerField(null=True, blank=True)
    time_spent = models.IntegerField(help_text="Seconds")
    answers = models.JSONField(default=dict, blank=True)
    marked_for_review = models.JSONField(default=list, blank=True)
    is_auto_submitted = models.BooleanField(default=False)
    completed_at = models.DateTimeField()

    class Meta:
        unique_together = ('assessment', 'student')
        ordering = ['-completed_at']

    def __str__(self):
        return f"{self.student} - {self.assessment.test_code}: {self.score}%"
