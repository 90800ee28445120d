"""
Exam authoring and catalog API.
Visibility: students see exams only when status=PUBLISHED and now in [start_date, end_date];
teachers see and delete only exams they created; admins see everything.
"""
import logging

from django.db import transaction
from django.db.models import Count, ProtectedError
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.models import User
from accounts.permissions import IsTeacherOrAdmin
from exams.exceptions import ExamHasAttempts, ExamNotAvailable, ExamNotFound
from exams.models import Exam
from exams.serializers import ExamCreateSerializer, ExamSerializer, exam_catalog_data
from exams.services.attempts import catalog_questions

logger = logging.getLogger(__name__)


def _visible_exams(user):
    qs = Exam.objects.annotate(question_count=Count('questions', distinct=True))
    if user.role == User.ROLE_STUDENT:
        now = timezone.now()
        return qs.filter(status=Exam.STATUS_PUBLISHED, start_date__lte=now, end_date__gte=now)
    qs = qs.annotate(attempt_count=Count('attempts', distinct=True))
    if user.role == User.ROLE_TEACHER:
        return qs.filter(created_by=user)
    return qs


def _get_exam_for(user, exam_id):
    try:
        exam = Exam.objects.get(pk=exam_id)
    except Exam.DoesNotExist:
        raise ExamNotFound()
    if user.role == User.ROLE_STUDENT:
        if exam.status != Exam.STATUS_PUBLISHED or not exam.is_open_at(timezone.now()):
            raise ExamNotAvailable()
    elif user.role == User.ROLE_TEACHER and exam.created_by_id != user.pk:
        raise PermissionDenied('You can only access your own exams.')
    return exam


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def exams_view(request):
    """
    GET  /api/exams?status=   -> exams visible to caller
    POST /api/exams           -> create exam with questions (teacher/admin)
    """
    if request.method == 'POST':
        if not IsTeacherOrAdmin().has_permission(request, None):
            return Response(
                {'detail': 'Teacher or admin access required.', 'code': 'permission_denied'},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = ExamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exam = serializer.save(created_by=request.user)
        logger.info("exam_create exam_id=%s user_id=%s questions=%s", exam.pk, request.user.pk, exam.questions.count())
        return Response(
            exam_catalog_data(exam, catalog_questions(exam), hide_answers=False),
            status=status.HTTP_201_CREATED,
        )

    qs = _visible_exams(request.user)
    status_filter = (request.query_params.get('status') or '').strip().upper()
    if status_filter and request.user.role != User.ROLE_STUDENT:
        if status_filter not in dict(Exam.STATUS_CHOICES):
            raise ValidationError({'status': [f'Must be one of {", ".join(dict(Exam.STATUS_CHOICES))}.']})
        qs = qs.filter(status=status_filter)
    return Response({'exams': ExamSerializer(qs.order_by('-created_at'), many=True).data})


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def exam_detail_view(request, exam_id):
    """
    GET    /api/exams/<id>  -> exam with questions (students: no isCorrect)
    DELETE /api/exams/<id>  -> teacher (own) or admin; refused once attempts exist
    """
    if request.method == 'DELETE':
        if not IsTeacherOrAdmin().has_permission(request, None):
            return Response(
                {'detail': 'Teacher or admin access required.', 'code': 'permission_denied'},
                status=status.HTTP_403_FORBIDDEN,
            )
        exam = _get_exam_for(request.user, exam_id)
        try:
            with transaction.atomic():
                exam.delete()
        except ProtectedError:
            logger.warning("exam_delete exam_id=%s user_id=%s has_attempts", exam_id, request.user.pk)
            raise ExamHasAttempts()
        logger.info("exam_delete exam_id=%s user_id=%s", exam_id, request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    exam = _get_exam_for(request.user, exam_id)
    return Response(exam_catalog_data(
        exam,
        catalog_questions(exam),
        hide_answers=request.user.role == User.ROLE_STUDENT,
    ))
