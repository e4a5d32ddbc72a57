from django.core.management.base import BaseCommand
from assessments.models import Student
from assessments.permissions import get_tokens_for_student


class Command(BaseCommand):
    help = 'Create (or reuse) a student and print a JWT access token for development/testing'

    def add_arguments(self, parser):
        parser.add_argument('--student-code', type=str, default='DEV001', help='Student code (default: DEV001)')
        parser.add_argument('--name', type=str, default='Dev Student', help='Full name for a new student')

    def handle(self, *args, **options):
        student, created = Student.objects.get_or_create(
            student_code=options['student_code'],
            defaults={'full_name': options['name']},
        )

        if created:
            self.stdout.write(self.style.SUCCESS(f'Created student: {student.student_code}'))
        else:
            self.stdout.write(self.style.WARNING(f'Using existing student: {student.student_code}'))

        tokens = get_tokens_for_student(student)
        self.stdout.write(f'  Student: {student.full_name} ({student.id})')
        self.stdout.write(f'  Access:  {tokens["access"]}')
        self.stdout.write(f'  Refresh: {tokens["refresh"]}')
