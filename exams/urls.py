"""
Exam and attempt API URLs
"""
from django.urls import path
from exams.views.exams import exams_view, exam_detail_view
from exams.views.attempts import (
    attempts_view,
    attempt_detail_view,
    attempt_answer_view,
    attempt_submit_view,
)

app_name = 'exams'

urlpatterns = [
    path('exams', exams_view, name='exams'),
    path('exams/<int:exam_id>', exam_detail_view, name='exam-detail'),
    path('attempts', attempts_view, name='attempts'),
    path('attempts/<int:attempt_id>', attempt_detail_view, name='attempt-detail'),
    path('attempts/<int:attempt_id>/answers', attempt_answer_view, name='attempt-answer'),
    path('attempts/<int:attempt_id>/submit', attempt_submit_view, name='attempt-submit'),
]
