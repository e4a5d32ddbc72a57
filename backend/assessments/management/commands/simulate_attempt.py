import asyncio
import random

from django.core.management.base import BaseCommand
from django.db import transaction

from assessments.attempt import PRACTICE
from assessments.autosave import AutosaveController
from assessments.exceptions import AssessmentError
from assessments.models import Assessment, Student
from assessments.runner import AttemptRunner
from assessments.services import AttemptService

DUMMY_PREFIX = "[ATTEMPT-SIM]"


class Command(BaseCommand):
    help = "Run one simulated student through an assessment on the live countdown and autosave loops."

    def add_arguments(self, parser):
        parser.add_argument('test_code', type=str, help='Test code to take')
        parser.add_argument('--accuracy', type=float, default=0.6,
                            help='Chance of answering each question correctly (default: 0.6)')
        parser.add_argument('--think', type=float, default=0.05,
                            help='Seconds spent per question (default: 0.05)')
        parser.add_argument('--tick', type=float, default=0.01,
                            help='Wall-clock seconds per countdown second (default: 0.01)')
        parser.add_argument('--seed', type=int, default=None, help='Random seed')

    def handle(self, *args, **options):
        rng = random.Random(options['seed'])
        service = AttemptService(rng=rng)

        try:
            assessment = service.find_assessment(options['test_code'])
        except AssessmentError as exc:
            self.stderr.write(self.style.ERROR(str(exc)))
            return

        student, _ = Student.objects.get_or_create(
            student_code=f"SIM-{rng.randrange(10**6):06d}",
            defaults={'full_name': f"{DUMMY_PREFIX} Student"},
        )

        try:
            with transaction.atomic():
                engine, _ = service.open_for(assessment, str(student.id))
        except AssessmentError as exc:
            self.stderr.write(self.style.ERROR(str(exc)))
            return

        self.stdout.write(self.style.MIGRATE_HEADING(
            f"\n{'='*60}\n  ATTEMPT SIMULATION - {assessment.title} ({assessment.test_code})\n{'='*60}"
        ))
        result = asyncio.run(self._run(engine, service, rng, options))
        self._report(assessment, result)

    async def _run(self, engine, service, rng, options):
        runner = AttemptRunner(
            engine,
            AutosaveController(engine, service.sessions),
            tick_interval=options['tick'],
        )
        runner.start()
        phase = engine.phase
        while engine.is_active:
            await asyncio.sleep(options['think'])
            if not engine.is_active:
                break
            question = engine.current_question
            if rng.random() < options['accuracy']:
                engine.select_answer(question.correct_answer)
            else:
                engine.select_answer(rng.choice(question.letters))
            engine.go_next()
            if phase == PRACTICE and engine.phase != PRACTICE:
                for notice in engine.drain_notices():
                    self.stdout.write(f"  {notice}")
                phase = engine.phase
        result = await runner.wait()
        runner.teardown()
        await runner.drain()
        return result

    def _report(self, assessment, result):
        if result is None:
            self.stderr.write(self.style.ERROR('Attempt ended without a result'))
            return
        self.stdout.write(f"  Level:          {result.difficulty_level}")
        self.stdout.write(f"  Practice score: {result.practice_score if result.practice_score is not None else '-'}")
        self.stdout.write(f"  Score:          {result.score}% ({result.correct_answers}/{result.total_questions})")
        self.stdout.write(f"  Time spent:     {result.time_spent}s of {assessment.duration_minutes * 60}s")
        self.stdout.write(self.style.SUCCESS(
            f"  {'Auto-submitted' if result.is_auto_submitted else 'Submitted'} at {result.completed_at:%H:%M:%S}"
        ))
