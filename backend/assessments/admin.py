from django.contrib import admin
from .models import (
    Assessment, Passage, Question, Student, AttemptCheckpoint, AttemptResult,
)


@admin.register(Assessment)
class AssessmentAdmin(admin.ModelAdmin):
    list_display = ['test_code', 'title', 'subject', 'duration_minutes', 'is_active', 'created_at']
    list_filter = ['subject', 'is_active']
    search_fields = ['title', 'test_code']


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['text_short', 'assessment', 'difficulty', 'order_index', 'created_at']
    list_filter = ['difficulty', 'question_type']
    search_fields = ['question_text']

    def text_short(self, obj):
        return obj.question_text[:80]
    text_short.short_description = 'Question'


@admin.register(AttemptResult)
class AttemptResultAdmin(admin.ModelAdmin):
    list_display = ['student', 'assessment', 'score', 'difficulty_level', 'practice_score', 'completed_at']
    list_filter = ['difficulty_level', 'is_auto_submitted']


admin.site.register(Passage)
admin.site.register(Student)
admin.site.register(AttemptCheckpoint)
