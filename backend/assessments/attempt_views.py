import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response

from .attempt import SUBMITTED
from .autosave import ACTION, CLIENT_TRIGGERS
from .exceptions import AssessmentError
from .models import Assessment
from .permissions import StudentJWTAuthentication, IsStudent
from .services import AttemptService
from .stores import ResultStore

logger = logging.getLogger(__name__)

student_auth = [StudentJWTAuthentication]
student_perm = [IsStudent]


@api_view(['POST'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def start_attempt(request):
    service = AttemptService()
    try:
        with transaction.atomic():
            engine, created = service.open(request.data.get('test_code'), str(request.user.id))
    except AssessmentError as exc:
        return _error(exc)

    return Response(_payload(engine), status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['GET'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def attempt_detail(request, test_id):
    return _apply(request, test_id, None, trigger=None)


@api_view(['POST'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def select_answer(request, test_id):
    answer = request.data.get('answer')
    return _apply(request, test_id, lambda engine: engine.select_answer(answer))


@api_view(['POST'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def next_question(request, test_id):
    return _apply(request, test_id, lambda engine: engine.go_next())


@api_view(['POST'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def previous_question(request, test_id):
    return _apply(request, test_id, lambda engine: engine.go_previous())


@api_view(['POST'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def toggle_flag(request, test_id):
    return _apply(request, test_id, lambda engine: engine.toggle_flag())


@api_view(['POST'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def jump_to_question(request, test_id):
    try:
        position = int(request.data.get('position'))
    except (TypeError, ValueError):
        return Response({'error': 'position must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
    return _apply(request, test_id, lambda engine: engine.jump_to(position))


@api_view(['POST'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def submit_attempt(request, test_id):
    return _apply(request, test_id, lambda engine: engine.submit())


@api_view(['POST'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def save_checkpoint(request, test_id):
    """Client-side autosave trigger: interval, tab hidden, or page unload."""
    trigger = request.data.get('trigger')
    if trigger not in CLIENT_TRIGGERS:
        return Response({'error': f"trigger must be one of: {', '.join(CLIENT_TRIGGERS)}"},
                        status=status.HTTP_400_BAD_REQUEST)
    return _apply(request, test_id, None, trigger=trigger)


@api_view(['GET'])
@authentication_classes(student_auth)
@permission_classes(student_perm)
def attempt_result(request, test_id):
    result = ResultStore().get(test_id, request.user.id)
    if result is None:
        return Response({'error': 'Test not submitted yet'}, status=status.HTTP_404_NOT_FOUND)
    return Response(result.to_dict())


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _apply(request, test_id, operation, trigger=ACTION):
    """Rebuild the attempt under a row lock, sync its clock, apply *operation*, checkpoint."""
    assessment = get_object_or_404(Assessment, id=test_id)

    raw_time = request.data.get('time_remaining') if request.method == 'POST' else None
    try:
        reported = int(raw_time) if raw_time is not None else None
    except (TypeError, ValueError):
        return Response({'error': 'time_remaining must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

    service = AttemptService()
    try:
        with transaction.atomic():
            engine, autosave = service.resume(assessment, str(request.user.id), lock=True)
            engine.sync_time(reported)
            if engine.is_active and operation is not None:
                operation(engine)
            if trigger is not None:
                autosave.save(trigger)
    except AssessmentError as exc:
        return _error(exc)

    return Response(_payload(engine))


def _payload(engine):
    payload = engine.state()
    payload['notices'] = engine.drain_notices()
    payload['result'] = engine.result.to_dict() if engine.phase == SUBMITTED else None
    return payload


def _error(exc):
    return Response({'error': str(exc)}, status=exc.status_code)
