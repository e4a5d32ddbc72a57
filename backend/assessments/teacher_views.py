import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .models import Assessment, Question, AttemptCheckpoint, AttemptResult
from .permissions import IsTeacher
from .serializers import (
    AssessmentSerializer,
    PassageSerializer,
    QuestionSerializer,
    QuestionReorderSerializer,
    AttemptResultSerializer,
)

logger = logging.getLogger(__name__)
teacher_perm = [IsTeacher]


def _own_assessment(request, assessment_id):
    return get_object_or_404(Assessment, id=assessment_id, created_by=request.user)


def _has_attempts(assessment):
    return (
        AttemptCheckpoint.objects.filter(assessment=assessment).exists()
        or AttemptResult.objects.filter(assessment=assessment).exists()
    )


@api_view(['POST', 'GET'])
@permission_classes(teacher_perm)
def teacher_assessments(request):
    if request.method == 'POST':
        serializer = AssessmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assessment = serializer.save(created_by=request.user)
        logger.info('Teacher %s created test %s (%s)', request.user.username, assessment.test_code, assessment.id)
        return Response(AssessmentSerializer(assessment).data, status=status.HTTP_201_CREATED)

    assessments = Assessment.objects.filter(created_by=request.user).order_by('-created_at')
    return Response(AssessmentSerializer(assessments, many=True).data)


@api_view(['PUT', 'DELETE'])
@permission_classes(teacher_perm)
def teacher_assessment_detail(request, assessment_id):
    assessment = _own_assessment(request, assessment_id)

    if request.method == 'DELETE':
        if AttemptResult.objects.filter(assessment=assessment).exists():
            return Response(
                {'error': 'Cannot delete a test that students have completed.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        assessment.delete()
        logger.info('Teacher %s deleted test %s', request.user.username, assessment_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # Checkpoints hold time remaining computed from the duration
    if 'duration_minutes' in request.data and _has_attempts(assessment):
        return Response(
            {'error': 'Cannot change the duration of a test that students have started.'},
            status=status.HTTP_400_BAD_REQUEST,
        )
    serializer = AssessmentSerializer(assessment, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(AssessmentSerializer(assessment).data)


@api_view(['POST', 'GET'])
@permission_classes(teacher_perm)
def teacher_questions(request, assessment_id):
    assessment = _own_assessment(request, assessment_id)

    if request.method == 'POST':
        serializer = QuestionSerializer(data=request.data, context={'assessment': assessment})
        serializer.is_valid(raise_exception=True)
        serializer.save(assessment=assessment)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    questions = assessment.questions.select_related('passage').order_by('order_index', 'created_at')
    difficulty = request.query_params.get('difficulty')
    if difficulty:
        questions = questions.filter(difficulty=difficulty)
    return Response(QuestionSerializer(questions, many=True).data)


@api_view(['PUT', 'DELETE'])
@permission_classes(teacher_perm)
def teacher_question_detail(request, question_id):
    question = get_object_or_404(Question, id=question_id, assessment__created_by=request.user)

    if request.method == 'DELETE':
        question.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = QuestionSerializer(
        question, data=request.data, partial=True, context={'assessment': question.assessment},
    )
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes(teacher_perm)
def teacher_reorder_questions(request, assessment_id):
    assessment = _own_assessment(request, assessment_id)
    serializer = QuestionReorderSerializer(data=request.data, context={'assessment': assessment})
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response({'message': 'Questions reordered'})


@api_view(['POST'])
@permission_classes(teacher_perm)
def teacher_passages(request, assessment_id):
    assessment = _own_assessment(request, assessment_id)
    serializer = PassageSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    serializer.save(assessment=assessment)
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes(teacher_perm)
def teacher_assessment_results(request, assessment_id):
    assessment = _own_assessment(request, assessment_id)
    results = AttemptResult.objects.filter(assessment=assessment).select_related('student')
    return Response(AttemptResultSerializer(results, many=True).data)
