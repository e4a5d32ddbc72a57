from django.contrib.auth.models import User
from rest_framework.test import APIClient

from assessments.models import Assessment, Question, Student
from assessments.permissions import get_tokens_for_student


def make_student(student_code="STU001", full_name="Test Student"):
    """Create a Student and return it."""
    return Student.objects.create(student_code=student_code, full_name=full_name)


def authenticated_client(student=None):
    """Return an APIClient with valid JWT for the given student."""
    if student is None:
        student = make_student()
    tokens = get_tokens_for_student(student)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
    return client, student


def teacher_client(username='teacher'):
    """Return an APIClient authenticated as a staff user."""
    user = User.objects.create_user(username, f'{username}@test.com', 'testpass123', is_staff=True)
    client = APIClient()
    client.force_authenticate(user=user)
    return client, user


def make_assessment(teacher, practice=5, easy=10, medium=10, hard=10, duration=60,
                    test_code='M12345', subject=Assessment.Subject.MATHEMATICS, title="Test Assessment"):
    """Create an Assessment with the given number of questions per tier.

    Every question has options A-D and correct answer 'A'.
    """
    assessment = Assessment.objects.create(
        title=title,
        subject=subject,
        test_code=test_code,
        duration_minutes=duration,
        created_by=teacher,
    )
    for tier, count in (('practice', practice), ('easy', easy), ('medium', medium), ('hard', hard)):
        for i in range(count):
            Question.objects.create(
                assessment=assessment,
                difficulty=tier,
                question_text=f"{tier} {i + 1}: 2 + {i} = ?",
                options=[str(2 + i), str(3 + i), str(4 + i), str(5 + i)],
                correct_answer='A',
                order_index=i,
            )
    return assessment
