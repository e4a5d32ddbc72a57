from rest_framework import status


class AssessmentError(Exception):
    """Base class for errors raised while starting or driving an attempt."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Assessment error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class InvalidTestCode(AssessmentError):
    default_message = 'Test code must be 6 characters'


class InvalidAnswer(AssessmentError):
    default_message = 'Answer is not one of the question options'


class InvalidPosition(AssessmentError):
    default_message = 'Question position is out of range'


class AssessmentNotFound(AssessmentError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Invalid test code'


class AttemptNotFound(AssessmentError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'No attempt in progress for this test'


class NoQuestionsAvailable(AssessmentError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'No questions available for this test'


class AlreadyCompleted(AssessmentError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'You have already completed this test'


class InvalidTransition(AssessmentError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Operation not allowed in the current phase'


class EmptyQuestionSet(AssessmentError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Cannot score an empty question set'
