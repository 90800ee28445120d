"""
Attempt lifecycle errors. Each carries a stable code rendered by
config.exceptions.custom_exception_handler as {"detail", "code"}.
"""
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied


class ExamNotFound(NotFound):
    default_detail = 'Exam not found.'
    default_code = 'exam_not_found'


class AttemptNotFound(NotFound):
    default_detail = 'Attempt not found.'
    default_code = 'attempt_not_found'


class ExamNotAvailable(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'This exam is not available.'
    default_code = 'exam_not_available'


class AttemptLimitReached(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Maximum number of attempts reached.'
    default_code = 'attempt_limit_reached'


class AnswerNotAuthorized(PermissionDenied):
    default_detail = 'This attempt does not belong to you.'
    default_code = 'not_attempt_owner'


class SubmissionClosed(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This exam has already been submitted.'
    default_code = 'submission_closed'


class AlreadySubmitted(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Attempt already submitted.'
    default_code = 'already_submitted'


class QuestionMismatch(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Question not found in this exam.'
    default_code = 'question_mismatch'


class ExamHasAttempts(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Exam already has attempts and cannot be deleted.'
    default_code = 'exam_has_attempts'
