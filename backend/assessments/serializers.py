from django.conf import settings
from django.db import transaction
from rest_framework import serializers

from .models import Assessment, Passage, Question, AttemptResult
from .records import option_letters
from .services import generate_test_code


class AssessmentSerializer(serializers.ModelSerializer):
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = Assessment
        fields = [
            'id', 'title', 'subject', 'description', 'test_code', 'duration_minutes',
            'is_active', 'target_grade', 'target_section', 'question_count',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'test_code', 'created_at', 'updated_at']

    def get_question_count(self, obj):
        return obj.questions.count()

    def validate_duration_minutes(self, value):
        if value < 1 or value > 600:
            raise serializers.ValidationError('Duration must be between 1 and 600 minutes')
        return value

    def create(self, validated_data):
        validated_data.setdefault('duration_minutes', settings.ASSESSMENT_DEFAULT_DURATION)
        validated_data['test_code'] = generate_test_code(validated_data['subject'])
        return super().create(validated_data)


class PassageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Passage
        fields = ['id', 'passage_code', 'title', 'content', 'passage_type', 'media_url', 'created_at']
        read_only_fields = ['id', 'created_at']


class QuestionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Question
        fields = [
            'id', 'passage', 'question_type', 'difficulty', 'question_text', 'options',
            'correct_answer', 'marks', 'order_index', 'media_url', 'media_type', 'created_at',
        ]
        read_only_fields = ['id', 'created_at']

    def validate_options(self, value):
        if not isinstance(value, list) or len(value) < 2:
            raise serializers.ValidationError('At least two options are required')
        if len(value) > 10:
            raise serializers.ValidationError('At most 10 options are allowed')
        if not all(isinstance(o, str) and o.strip() for o in value):
            raise serializers.ValidationError('Options must be non-empty strings')
        return value

    def validate_correct_answer(self, value):
        return value.strip().upper()[:1]

    def validate_marks(self, value):
        if value < 0:
            raise serializers.ValidationError('Marks cannot be negative')
        return value

    def validate(self, attrs):
        options = attrs.get('options', getattr(self.instance, 'options', None)) or []
        correct = attrs.get('correct_answer', getattr(self.instance, 'correct_answer', ''))
        if correct not in option_letters(len(options)) or not correct:
            raise serializers.ValidationError({'correct_answer': 'Please select the correct answer'})

        media_url = attrs.get('media_url', getattr(self.instance, 'media_url', ''))
        media_type = attrs.get('media_type', getattr(self.instance, 'media_type', ''))
        if bool(media_url) != bool(media_type):
            raise serializers.ValidationError({'media_type': 'Media URL and media type go together'})

        passage = attrs.get('passage')
        assessment = self.context.get('assessment') or getattr(self.instance, 'assessment', None)
        if passage is not None and assessment is not None and passage.assessment_id != assessment.id:
            raise serializers.ValidationError({'passage': 'Passage belongs to another test'})
        return attrs


class QuestionReorderSerializer(serializers.Serializer):
    question_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)

    def validate_question_ids(self, value):
        assessment = self.context['assessment']
        known = set(assessment.questions.values_list('id', flat=True))
        if len(set(value)) != len(value) or not set(value) <= known:
            raise serializers.ValidationError('Question ids must be distinct questions of this test')
        return value

    @transaction.atomic
    def save(self):
        assessment = self.context['assessment']
        for index, question_id in enumerate(self.validated_data['question_ids']):
            Question.objects.filter(assessment=assessment, id=question_id).update(order_index=index)


class AttemptResultSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.full_name', read_only=True)
    student_code = serializers.CharField(source='student.student_code', read_only=True)

    class Meta:
        model = AttemptResult
        fields = [
            'id', 'student_name', 'student_code', 'score', 'correct_answers', 'wrong_answers',
            'total_questions', 'difficulty_level', 'practice_score', 'time_spent',
            'is_auto_submitted', 'completed_at',
        ]
