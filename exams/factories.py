"""
Builders for exams, questions and users shared by the exams test modules.
"""
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from exams.models import Exam, Question, QuestionOption


def make_user(email, role=User.ROLE_STUDENT, full_name=None):
    return User.objects.create_user(
        email=email,
        password="pass123",
        full_name=full_name or email.split("@")[0].title(),
        role=role,
    )


def auth_header(user):
    token = str(AccessToken.for_user(user))
    return {"HTTP_AUTHORIZATION": f"Bearer {token}"}


def make_exam(teacher, status=Exam.STATUS_PUBLISHED, max_attempts=1, opens_in=None, closes_in=None, **extra):
    now = timezone.now()
    return Exam.objects.create(
        title=extra.pop("title", "Algebra midterm"),
        duration_minutes=extra.pop("duration_minutes", 60),
        status=status,
        max_attempts=max_attempts,
        start_date=now + (opens_in if opens_in is not None else -timedelta(hours=1)),
        end_date=now + (closes_in if closes_in is not None else timedelta(hours=1)),
        created_by=teacher,
        **extra,
    )


def add_mcq(exam, points, correct=("A",), wrong=("B", "C"), order=0):
    """MCQ with the given option texts; returns (question, {text: option})."""
    question = Question.objects.create(
        exam=exam, type=Question.TYPE_MCQ, text=f"MCQ worth {points}", points=Decimal(str(points)), order=order,
    )
    options = {}
    for i, text in enumerate(list(correct) + list(wrong)):
        options[text] = QuestionOption.objects.create(
            question=question, text=text, is_correct=text in correct, order=i,
        )
    return question, options


def add_open_ended(exam, points, order=0):
    return Question.objects.create(
        exam=exam, type=Question.TYPE_OPEN_ENDED, text="Explain your reasoning", points=Decimal(str(points)), order=order,
    )
