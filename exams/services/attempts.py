"""
Attempt lifecycle: start -> answer (any number of times) -> finalize.

Every operation receives the authenticated principal (request.user) explicitly.
Concurrency:
- start locks the exam row and relies on the unique (exam, student, attempt_number)
  constraint, so a lost check-then-create race surfaces as AttemptLimitReached.
- answer and finalize lock the attempt row, so no answer is written after submit.
"""
import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Prefetch, Sum
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from accounts.models import User
from exams.exceptions import (
    AlreadySubmitted,
    AnswerNotAuthorized,
    AttemptLimitReached,
    AttemptNotFound,
    ExamNotAvailable,
    ExamNotFound,
    QuestionMismatch,
    SubmissionClosed,
)
from exams.grading import grade_answer, normalize_option_ids, option_id_set
from exams.models import ActivityLog, Exam, ExamAnswer, ExamAttempt, Question, QuestionOption
from exams.services.activity import record_activity

logger = logging.getLogger(__name__)


def _now():
    return timezone.now()


def catalog_questions(exam):
    """Questions of the exam with options, in display order."""
    options = Prefetch('options', queryset=QuestionOption.objects.order_by('order', 'id'))
    return list(exam.questions.prefetch_related(options).order_by('order', 'id'))


def _count_attempts(exam, student):
    return ExamAttempt.objects.filter(exam=exam, student=student).count()


def start_attempt(user, exam_id):
    """
    Start a new attempt. Returns (attempt, questions).
    Raises ExamNotFound, ExamNotAvailable, AttemptLimitReached.
    """
    now = _now()
    with transaction.atomic():
        try:
            exam = Exam.objects.select_for_update().get(pk=exam_id)
        except Exam.DoesNotExist:
            logger.warning("start_attempt exam_id=%s user_id=%s exam_not_found", exam_id, user.pk)
            raise ExamNotFound()

        if exam.status != Exam.STATUS_PUBLISHED:
            logger.warning("start_attempt exam_id=%s user_id=%s status=%s not_published", exam.pk, user.pk, exam.status)
            raise ExamNotAvailable('This exam is not published.')
        if not exam.is_open_at(now):
            logger.warning("start_attempt exam_id=%s user_id=%s outside_window", exam.pk, user.pk)
            raise ExamNotAvailable('This exam is not available at this time.')

        used = _count_attempts(exam, user)
        if used >= exam.max_attempts:
            logger.warning(
                "start_attempt exam_id=%s user_id=%s used=%s max=%s attempt_limit_reached",
                exam.pk, user.pk, used, exam.max_attempts,
            )
            raise AttemptLimitReached()

        questions = catalog_questions(exam)
        total_points = sum((q.points for q in questions), Decimal('0'))
        try:
            with transaction.atomic():
                attempt = ExamAttempt.objects.create(
                    exam=exam,
                    student=user,
                    attempt_number=used + 1,
                    status=ExamAttempt.STATUS_IN_PROGRESS,
                    started_at=now,
                    total_points=total_points,
                )
        except IntegrityError:
            # Another start for the same (exam, student) took this slot first
            logger.warning(
                "start_attempt exam_id=%s user_id=%s attempt_number=%s lost_race",
                exam.pk, user.pk, used + 1,
            )
            raise AttemptLimitReached()

        record_activity(
            attempt,
            ActivityLog.ACTION_EXAM_STARTED,
            {'attemptNumber': attempt.attempt_number},
            at=now,
        )

    logger.info(
        "start_attempt exam_id=%s user_id=%s attempt_id=%s attempt_number=%s total_points=%s",
        exam.pk, user.pk, attempt.pk, attempt.attempt_number, total_points,
    )
    return attempt, questions


def _lock_attempt(attempt_id):
    try:
        return ExamAttempt.objects.select_for_update().get(pk=attempt_id)
    except (ExamAttempt.DoesNotExist, ValueError, TypeError):
        raise AttemptNotFound()


def _validate_selection(question, selected):
    if not question.is_auto_gradable:
        if selected:
            raise ValidationError({'selectedOptionIds': ['Options can only be selected for multiple choice questions.']})
        return
    known = {opt.id for opt in question.options.all()}
    unknown = option_id_set(selected) - known
    if unknown:
        raise ValidationError({'selectedOptionIds': ['Option does not belong to this question.']})


def submit_answer(user, attempt_id, question_id, text_answer=None, selected_option_ids=None):
    """
    Create or replace the answer for (attempt, question), graded on write.
    Raises AttemptNotFound, AnswerNotAuthorized, SubmissionClosed, QuestionMismatch, ValidationError.
    """
    with transaction.atomic():
        attempt = _lock_attempt(attempt_id)
        if attempt.student_id != user.pk:
            logger.warning("submit_answer attempt_id=%s user_id=%s not_owner", attempt.pk, user.pk)
            raise AnswerNotAuthorized()
        if attempt.is_submitted:
            logger.warning("submit_answer attempt_id=%s user_id=%s submission_closed", attempt.pk, user.pk)
            raise SubmissionClosed()

        try:
            question = Question.objects.prefetch_related('options').get(pk=question_id, exam_id=attempt.exam_id)
        except Question.DoesNotExist:
            logger.warning(
                "submit_answer attempt_id=%s question_id=%s user_id=%s question_mismatch",
                attempt.pk, question_id, user.pk,
            )
            raise QuestionMismatch()

        selected = normalize_option_ids(selected_option_ids)
        _validate_selection(question, selected)
        verdict = grade_answer(question, selected)

        answer, created = ExamAnswer.objects.update_or_create(
            attempt=attempt,
            question=question,
            defaults={
                'text_answer': text_answer,
                'selected_option_ids': selected,
                'is_correct': verdict.is_correct,
                'points_awarded': verdict.points_awarded,
            },
        )
        record_activity(
            attempt,
            ActivityLog.ACTION_ANSWER_SAVED,
            {'questionId': question.pk, 'answerId': answer.pk, 'replaced': not created},
        )

    logger.info(
        "submit_answer attempt_id=%s question_id=%s user_id=%s is_correct=%s points=%s",
        attempt.pk, question.pk, user.pk, verdict.is_correct, verdict.points_awarded,
    )
    return answer


def finalize_attempt(user, attempt_id):
    """
    IN_PROGRESS -> SUBMITTED. Re-finalizing raises AlreadySubmitted.
    auto_score is the sum of points awarded to auto-graded answers.
    """
    now = _now()
    with transaction.atomic():
        attempt = _lock_attempt(attempt_id)
        if attempt.student_id != user.pk:
            logger.warning("finalize_attempt attempt_id=%s user_id=%s not_owner", attempt.pk, user.pk)
            raise AnswerNotAuthorized()
        if attempt.is_submitted:
            logger.warning("finalize_attempt attempt_id=%s user_id=%s already_submitted", attempt.pk, user.pk)
            raise AlreadySubmitted()

        answers = attempt.answers.all()
        auto_score = answers.aggregate(total=Sum('points_awarded'))['total'] or Decimal('0')
        attempt.status = ExamAttempt.STATUS_SUBMITTED
        attempt.submitted_at = now
        attempt.auto_score = auto_score
        attempt.save(update_fields=['status', 'submitted_at', 'auto_score'])

        record_activity(
            attempt,
            ActivityLog.ACTION_EXAM_SUBMITTED,
            {'answeredCount': answers.count(), 'autoScore': str(auto_score)},
            at=now,
        )

    logger.info(
        "finalize_attempt attempt_id=%s user_id=%s auto_score=%s total_points=%s",
        attempt.pk, user.pk, auto_score, attempt.total_points,
    )
    return attempt


def can_view_attempt(user, attempt):
    if user.role == User.ROLE_ADMIN:
        return True
    if user.role == User.ROLE_TEACHER:
        return attempt.exam.created_by_id == user.pk
    return attempt.student_id == user.pk


def get_attempt(user, attempt_id):
    """Attempt with exam, student and answers loaded; visibility per role."""
    try:
        attempt = (
            ExamAttempt.objects
            .select_related('exam', 'student')
            .prefetch_related('answers')
            .get(pk=attempt_id)
        )
    except (ExamAttempt.DoesNotExist, ValueError, TypeError):
        raise AttemptNotFound()
    if not can_view_attempt(user, attempt):
        logger.warning("get_attempt attempt_id=%s user_id=%s role=%s forbidden", attempt.pk, user.pk, user.role)
        raise PermissionDenied('You do not have access to this attempt.')
    return attempt


def list_attempts(user, exam_id=None, status=None):
    """
    STUDENT: own attempts. TEACHER: attempts of exams they created
    (asking for someone else's exam is Forbidden). ADMIN: everything.
    """
    qs = ExamAttempt.objects.select_related('exam', 'student')
    if user.role == User.ROLE_STUDENT:
        qs = qs.filter(student=user)
    elif user.role == User.ROLE_TEACHER:
        if exam_id is not None:
            exam = Exam.objects.filter(pk=exam_id).first()
            if exam is None or exam.created_by_id != user.pk:
                logger.warning("list_attempts exam_id=%s user_id=%s forbidden", exam_id, user.pk)
                raise PermissionDenied('You can only view attempts for your own exams.')
        qs = qs.filter(exam__created_by=user)
    elif user.role != User.ROLE_ADMIN:
        return qs.none()

    if exam_id is not None:
        qs = qs.filter(exam_id=exam_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by('-started_at', '-id')
