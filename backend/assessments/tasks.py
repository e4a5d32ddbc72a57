import logging
from datetime import timedelta

from celery import shared_task
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=300,
    max_retries=3,
)
def auto_submit_expired_attempts():
    """Finalize attempts whose time ran out after the student went away.

    The clock only advances while a client reports it, so an abandoned
    attempt is judged by wall clock: last save plus the time it had left.
    """
    from .models import AttemptCheckpoint

    now = timezone.now()
    candidates = list(
        AttemptCheckpoint.objects
        .filter(last_saved_at__lte=now - timedelta(minutes=1))
        .values_list('assessment_id', 'student_id', 'last_saved_at', 'time_remaining')
    )

    count = 0
    for assessment_id, student_id, last_saved_at, time_remaining in candidates:
        if (now - last_saved_at).total_seconds() < time_remaining:
            continue
        try:
            if submit_expired_attempt(assessment_id, student_id, now):
                count += 1
        except Exception:
            logger.exception('Failed to auto-submit attempt for test %s student %s', assessment_id, student_id)

    return f"{count} attempts auto-submitted"


def submit_expired_attempt(assessment_id, student_id, now=None):
    """Finalize one abandoned attempt under its row lock.

    Returns False when the attempt is gone or was saved again with time left.
    """
    from .exceptions import AssessmentError
    from .models import Assessment
    from .services import AttemptService

    now = now or timezone.now()
    with transaction.atomic():
        try:
            assessment = Assessment.objects.get(id=assessment_id)
        except Assessment.DoesNotExist:
            return False
        try:
            engine, _ = AttemptService().resume(assessment, str(student_id), lock=True)
        except AssessmentError as exc:
            logger.warning('Skipping expired attempt for test %s student %s: %s', assessment_id, student_id, exc)
            return False

        if engine.result is None:
            if engine.last_saved_at is None:
                return False
            if (now - engine.last_saved_at).total_seconds() < engine.time_remaining:
                return False
            engine.sync_time(0)
        logger.info('Auto-submitted abandoned attempt for test %s student %s', assessment_id, student_id)
        return engine.result is not None


@shared_task(
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    max_retries=5,
)
def persist_result(result_data):
    """Retry storing a Result whose first insert failed at submission time."""
    from .records import Result
    from .stores import ResultStore

    result = Result.from_dict(result_data)
    store = ResultStore()
    if store.exists(result.test_id, result.student_id):
        logger.info('Result for test %s student %s already stored', result.test_id, result.student_id)
        return
    store.insert(result)
    logger.info('Stored result for test %s student %s on retry', result.test_id, result.student_id)
