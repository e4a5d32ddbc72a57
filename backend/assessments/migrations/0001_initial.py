import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Assessment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('subject', models.CharField(choices=[('English', 'English'), ('Science', 'Science'), ('Mathematics', 'Mathematics')], max_length=20)),
                ('description', models.TextField(blank=True, default='')),
                ('test_code', models.CharField(max_length=6, unique=True)),
                ('duration_minutes', models.IntegerField(default=60, help_text='Duration in minutes')),
                ('is_active', models.BooleanField(default=True)),
                ('target_grade', models.CharField(blank=True, default='', max_length=20)),
                ('target_section', models.CharField(blank=True, default='', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assessments', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('full_name', models.CharField(max_length=255)),
                ('student_code', models.CharField(max_length=50, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='Passage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('passage_code', models.CharField(max_length=50)),
                ('title', models.CharField(blank=True, default='', max_length=255)),
                ('content', models.TextField()),
                ('passage_type', models.CharField(blank=True, default='', max_length=50)),
                ('media_url', models.URLField(blank=True, default='', max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('assessment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='passages', to='assessments.assessment')),
            ],
        ),
        migrations.CreateModel(
            name='Question',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('question_type', models.CharField(choices=[('mcq', 'Multiple choice')], default='mcq', max_length=10)),
                ('difficulty', models.CharField(choices=[('practice', 'Practice'), ('easy', 'Easy'), ('medium', 'Medium'), ('hard', 'Hard')], default='medium', max_length=10)),
                ('question_text', models.TextField()),
                ('options', models.JSONField(default=list, help_text='Option texts in display order: A, B, C, ...')),
                ('correct_answer', models.CharField(help_text='Letter of the correct option', max_length=1)),
                ('marks', models.IntegerField(default=1)),
                ('order_index', models.IntegerField(default=0)),
                ('media_url', models.URLField(blank=True, default='', max_length=500)),
                ('media_type', models.CharField(blank=True, choices=[('image', 'Image'), ('audio', 'Audio'), ('video', 'Video')], default='', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('assessment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='questions', to='assessments.assessment')),
                ('passage', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='questions', to='assessments.passage')),
            ],
            options={
                'ordering': ['order_index', 'created_at'],
                'indexes': [models.Index(fields=['assessment', 'difficulty'], name='question_tier_idx')],
            },
        ),
        migrations.CreateModel(
            name='AttemptCheckpoint',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('answers', models.JSONField(blank=True, default=dict)),
                ('question_order', models.JSONField(blank=True, default=list)),
                ('current_question', models.IntegerField(default=0)),
                ('time_remaining', models.IntegerField(help_text='Seconds')),
                ('marked_for_review', models.JSONField(blank=True, default=list)),
                ('difficulty_level', models.CharField(blank=True, max_length=10, null=True)),
                ('practice_complete', models.BooleanField(default=False)),
                ('practice_score', models.IntegerField(blank=True, null=True)),
                ('started_at', models.DateTimeField(auto_now_add=True)),
                ('last_saved_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('assessment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='checkpoints', to='assessments.assessment')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='checkpoints', to='assessments.student')),
            ],
            options={
                'unique_together': {('assessment', 'student')},
            },
        ),
        migrations.CreateModel(
            name='AttemptResult',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('score', models.IntegerField()),
                ('correct_answers', models.IntegerField()),
                ('wrong_answers', models.IntegerField()),
                ('total_questions', models.IntegerField()),
                ('difficulty_level', models.CharField(blank=True, max_length=10, null=True)),
                ('practice_score', models.IntegerField(blank=True, null=True)),
                ('time_spent', models.IntegerField(help_text='Seconds')),
                ('answers', models.JSONField(blank=True, default=dict)),
                ('marked_for_review', models.JSONField(blank=True, default=list)),
                ('is_auto_submitted', models.BooleanField(default=False)),
                ('completed_at', models.DateTimeField()),
                ('assessment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='assessments.assessment')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='assessments.student')),
            ],
            options={
                'ordering': ['-completed_at'],
                'unique_together': {('assessment', 'student')},
            },
        ),
    ]
