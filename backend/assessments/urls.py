from django.urls import path
from . import attempt_views, teacher_views


urlpatterns = [
    # Teacher authoring
    path('teacher/assessments/', teacher_views.teacher_assessments, name='teacher-assessments'),
    path('teacher/assessments/<uuid:assessment_id>/', teacher_views.teacher_assessment_detail,
         name='teacher-assessment-detail'),
    path('teacher/assessments/<uuid:assessment_id>/questions/', teacher_views.teacher_questions,
         name='teacher-questions'),
    path('teacher/assessments/<uuid:assessment_id>/questions/reorder/', teacher_views.teacher_reorder_questions,
         name='teacher-reorder-questions'),
    path('teacher/assessments/<uuid:assessment_id>/passages/', teacher_views.teacher_passages,
         name='teacher-passages'),
    path('teacher/assessments/<uuid:assessment_id>/results/', teacher_views.teacher_assessment_results,
         name='teacher-assessment-results'),
    path('teacher/questions/<uuid:question_id>/', teacher_views.teacher_question_detail,
         name='teacher-question-detail'),

    # Student attempts
    path('attempts/start/', attempt_views.start_attempt, name='start-attempt'),
    path('attempts/<uuid:test_id>/', attempt_views.attempt_detail, name='attempt-detail'),
    path('attempts/<uuid:test_id>/answer/', attempt_views.select_answer, name='attempt-answer'),
    path('attempts/<uuid:test_id>/next/', attempt_views.next_question, name='attempt-next'),
    path('attempts/<uuid:test_id>/previous/', attempt_views.previous_question, name='attempt-previous'),
    path('attempts/<uuid:test_id>/flag/', attempt_views.toggle_flag, name='attempt-flag'),
    path('attempts/<uuid:test_id>/jump/', attempt_views.jump_to_question, name='attempt-jump'),
    path('attempts/<uuid:test_id>/submit/', attempt_views.submit_attempt, name='attempt-submit'),
    path('attempts/<uuid:test_id>/checkpoint/', attempt_views.save_checkpoint, name='attempt-checkpoint'),
    path('results/<uuid:test_id>/', attempt_views.attempt_result, name='attempt-result'),
]
