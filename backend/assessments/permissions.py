from django.contrib.auth.models import User
from django.core.cache import cache
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import BasePermission
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Student


class StudentJWTAuthentication(JWTAuthentication):
    def get_user(self, validated_token):
        student_id = validated_token.get('student_id')
        if not student_id:
            raise AuthenticationFailed('Token has no student_id claim')

        cache_key = f'student_auth_{student_id}'
        student = cache.get(cache_key)
        if student is not None:
            return student

        try:
            student = Student.objects.get(id=student_id)
        except Student.DoesNotExist:
            raise AuthenticationFailed('Student not found')

        cache.set(cache_key, student, timeout=60)
        return student


class IsStudent(BasePermission):
    def has_permission(self, request, view):
        return isinstance(request.user, Student)


class IsTeacher(BasePermission):
    """Django staff users author assessments."""

    def has_permission(self, request, view):
        user = request.user
        return isinstance(user, User) and user.is_authenticated and user.is_staff


def get_tokens_for_student(student):
    refresh = RefreshToken()
    refresh['student_id'] = str(student.id)
    refresh['full_name'] = student.full_name
    return {
        'access': str(refresh.access_token),
        'refresh': str(refresh),
        'student_id': str(student.id),
        'full_name': student.full_name,
    }
