"""
Exams, questions/options, student attempts, per-question answers and the
attempt activity log.
Attempts snapshot total_points at creation; answers are unique per (attempt, question).
"""
from decimal import Decimal

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone

from accounts.models import User


class Exam(models.Model):
    """Timed exam with availability window and attempt limit."""
    STATUS_DRAFT = 'DRAFT'
    STATUS_PUBLISHED = 'PUBLISHED'
    STATUS_ARCHIVED = 'ARCHIVED'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_PUBLISHED, 'Published'),
        (STATUS_ARCHIVED, 'Archived'),
    ]
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    duration_minutes = models.PositiveIntegerField(help_text='Duration in minutes')
    passing_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text='Percentage needed to pass',
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    max_attempts = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name='created_exams',
        db_column='created_by_id',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'exams'
        verbose_name = 'Exam'
        verbose_name_plural = 'Exams'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['start_date'], name='exams_start_d_6a1f0c_idx'),
            models.Index(fields=['end_date'], name='exams_end_dat_3b7e21_idx'),
            models.Index(fields=['created_by', 'status'], name='exams_created_9d4a55_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(max_attempts__gte=1),
                name='exam_max_attempts_gte_1',
            ),
        ]

    def __str__(self):
        return self.title

    def is_open_at(self, moment):
        """Eligibility window is inclusive on both ends."""
        return self.start_date <= moment <= self.end_date


class Question(models.Model):
    TYPE_MCQ = 'MCQ'
    TYPE_OPEN_ENDED = 'OPEN_ENDED'
    TYPE_SHORT_ANSWER = 'SHORT_ANSWER'
    TYPE_CHOICES = [
        (TYPE_MCQ, 'Multiple Choice'),
        (TYPE_OPEN_ENDED, 'Open Ended'),
        (TYPE_SHORT_ANSWER, 'Short Answer'),
    ]
    AUTO_GRADABLE_TYPES = (TYPE_MCQ,)

    exam = models.ForeignKey(
        Exam,
        on_delete=models.CASCADE,
        related_name='questions',
    )
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, db_index=True)
    text = models.TextField()
    points = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )
    order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'questions'
        verbose_name = 'Question'
        verbose_name_plural = 'Questions'
        ordering = ['exam', 'order', 'id']
        indexes = [models.Index(fields=['exam', 'order'], name='questions_exam_id_2c8f1e_idx')]
        constraints = [
            models.CheckConstraint(condition=models.Q(points__gt=0), name='question_points_gt_0'),
        ]

    def __str__(self):
        return self.text[:50] + '...' if len(self.text) > 50 else self.text

    @property
    def is_auto_gradable(self):
        return self.type in self.AUTO_GRADABLE_TYPES


class QuestionOption(models.Model):
    """Option for multiple choice questions."""
    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name='options',
    )
    text = models.TextField()
    is_correct = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'question_options'
        verbose_name = 'Question Option'
        verbose_name_plural = 'Question Options'
        ordering = ['question', 'order', 'id']

    def __str__(self):
        return self.text[:30] + '...' if len(self.text) > 30 else self.text


class ExamAttempt(models.Model):
    """One student's attempt at an exam; attempt_number is the ordinal per (exam, student)."""
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_SUBMITTED = 'SUBMITTED'
    STATUS_CHOICES = [
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_SUBMITTED, 'Submitted'),
    ]
    exam = models.ForeignKey(
        Exam,
        on_delete=models.PROTECT,
        related_name='attempts',
    )
    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='exam_attempts',
        limit_choices_to={'role': User.ROLE_STUDENT},
    )
    attempt_number = models.PositiveIntegerField()
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_IN_PROGRESS,
        db_index=True,
    )
    started_at = models.DateTimeField(default=timezone.now)
    submitted_at = models.DateTimeField(null=True, blank=True)
    total_points = models.DecimalField(max_digits=10, decimal_places=2)
    auto_score = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    class Meta:
        db_table = 'exam_attempts'
        verbose_name = 'Exam Attempt'
        verbose_name_plural = 'Exam Attempts'
        ordering = ['-started_at', '-id']
        indexes = [
            models.Index(fields=['student', 'exam'], name='exam_attemp_student_5e0b7a_idx'),
            models.Index(fields=['exam', 'status'], name='exam_attemp_exam_id_a41c9d_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'student', 'attempt_number'],
                name='unique_exam_student_attempt_number',
            ),
            models.CheckConstraint(
                condition=models.Q(attempt_number__gte=1),
                name='exam_attempt_number_gte_1',
            ),
        ]

    def __str__(self):
        return f"{self.student.full_name} - {self.exam.title} #{self.attempt_number}"

    @property
    def is_submitted(self):
        return self.status == self.STATUS_SUBMITTED


class ExamAnswer(models.Model):
    """Answer to one question within an attempt. Re-submission replaces it in place."""
    attempt = models.ForeignKey(
        ExamAttempt,
        on_delete=models.CASCADE,
        related_name='answers',
    )
    question = models.ForeignKey(
        Question,
        on_delete=models.PROTECT,
        related_name='answers',
    )
    text_answer = models.TextField(null=True, blank=True)
    selected_option_ids = models.JSONField(default=list, blank=True)
    is_correct = models.BooleanField(null=True, blank=True)
    points_awarded = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'exam_answers'
        verbose_name = 'Exam Answer'
        verbose_name_plural = 'Exam Answers'
        ordering = ['question__order', 'question_id']
        constraints = [
            models.UniqueConstraint(
                fields=['attempt', 'question'],
                name='unique_attempt_question_answer',
            ),
        ]

    def __str__(self):
        return f"Attempt {self.attempt_id} - Q{self.question_id}"


class ActivityLog(models.Model):
    """Append-only audit trail of attempt lifecycle events."""
    ACTION_EXAM_STARTED = 'EXAM_STARTED'
    ACTION_ANSWER_SAVED = 'ANSWER_SAVED'
    ACTION_EXAM_SUBMITTED = 'EXAM_SUBMITTED'
    ACTION_CHOICES = [
        (ACTION_EXAM_STARTED, 'Exam Started'),
        (ACTION_ANSWER_SAVED, 'Answer Saved'),
        (ACTION_EXAM_SUBMITTED, 'Exam Submitted'),
    ]
    attempt = models.ForeignKey(
        ExamAttempt,
        on_delete=models.CASCADE,
        related_name='activity_logs',
    )
    action = models.CharField(max_length=30, choices=ACTION_CHOICES, db_index=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'activity_logs'
        verbose_name = 'Activity Log'
        verbose_name_plural = 'Activity Logs'
        ordering = ['attempt', 'id']
        indexes = [models.Index(fields=['attempt', 'action'], name='activity_lo_attempt_7f3e90_idx')]

    def __str__(self):
        return f"Attempt {self.attempt_id} - {self.action}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Activity log entries are append-only')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError('Activity log entries are append-only')
