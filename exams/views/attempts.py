"""
Attempt API: start, answer, submit (students); detail and list (any role, scoped).
Business rules live in exams.services.attempts; errors are APIExceptions rendered
by the global exception handler.
"""
from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.models import User
from accounts.permissions import IsStudent
from exams.models import ExamAttempt
from exams.serializers import (
    ExamAnswerSerializer,
    ExamAttemptDetailSerializer,
    ExamAttemptSerializer,
    StartAttemptSerializer,
    SubmitAnswerSerializer,
    exam_catalog_data,
)
from exams.services import attempts as attempt_service


class AttemptsPagination(PageNumberPagination):
    page_size = settings.ATTEMPTS_PAGE_SIZE
    page_size_query_param = 'page_size'
    max_page_size = 100


def _int_param(request, name):
    raw = request.query_params.get(name)
    if raw in (None, ''):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: ['A valid integer is required.']})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def attempts_view(request):
    """
    GET  /api/attempts?examId=&status=&page=  -> paginated attempts visible to caller
    POST /api/attempts  {examId}               -> start attempt (students only)
    """
    if request.method == 'POST':
        if not IsStudent().has_permission(request, None):
            return Response(
                {'detail': 'Only students can start exams.', 'code': 'permission_denied'},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = StartAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attempt, questions = attempt_service.start_attempt(request.user, serializer.validated_data['examId'])
        return Response({
            'attempt': ExamAttemptSerializer(attempt).data,
            'exam': exam_catalog_data(attempt.exam, questions, hide_answers=True),
        }, status=status.HTTP_201_CREATED)

    status_filter = (request.query_params.get('status') or '').strip().upper() or None
    if status_filter and status_filter not in dict(ExamAttempt.STATUS_CHOICES):
        raise ValidationError({'status': [f'Must be one of {", ".join(dict(ExamAttempt.STATUS_CHOICES))}.']})
    qs = attempt_service.list_attempts(
        request.user,
        exam_id=_int_param(request, 'examId'),
        status=status_filter,
    )
    paginator = AttemptsPagination()
    page = paginator.paginate_queryset(qs, request)
    return paginator.get_paginated_response(ExamAttemptSerializer(page, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def attempt_detail_view(request, attempt_id):
    """
    GET /api/attempts/<id>
    Owner student, owning teacher or admin. Students never see option correctness.
    """
    attempt = attempt_service.get_attempt(request.user, attempt_id)
    data = ExamAttemptDetailSerializer(attempt).data
    data['exam'] = exam_catalog_data(
        attempt.exam,
        attempt_service.catalog_questions(attempt.exam),
        hide_answers=request.user.role == User.ROLE_STUDENT,
    )
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def attempt_answer_view(request, attempt_id):
    """
    POST /api/attempts/<id>/answers
    Body: {questionId, textAnswer?, selectedOptionIds?}
    Re-posting for the same question replaces the previous answer.
    """
    serializer = SubmitAnswerSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    answer = attempt_service.submit_answer(
        request.user,
        attempt_id,
        data['questionId'],
        text_answer=data.get('textAnswer'),
        selected_option_ids=data.get('selectedOptionIds'),
    )
    return Response({'answer': ExamAnswerSerializer(answer).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def attempt_submit_view(request, attempt_id):
    """
    POST /api/attempts/<id>/submit
    Finalizes the attempt; a second call returns 409 already_submitted.
    """
    attempt = attempt_service.finalize_attempt(request.user, attempt_id)
    return Response({'attempt': ExamAttemptSerializer(attempt).data})
