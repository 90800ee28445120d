"""
Admin configuration for exams app
"""
from django.contrib import admin
from .models import Exam, Question, QuestionOption, ExamAttempt, ExamAnswer, ActivityLog


class QuestionOptionInline(admin.TabularInline):
    model = QuestionOption
    extra = 0


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0
    show_change_link = True


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ['title', 'status', 'start_date', 'end_date', 'max_attempts', 'created_by']
    list_filter = ['status']
    search_fields = ['title', 'created_by__email']
    inlines = [QuestionInline]


@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ['text', 'exam', 'type', 'points', 'order']
    list_filter = ['type']
    inlines = [QuestionOptionInline]


@admin.register(ExamAttempt)
class ExamAttemptAdmin(admin.ModelAdmin):
    """Attempts are read-only here; they change only through the attempt API."""
    list_display = ['student', 'exam', 'attempt_number', 'status', 'started_at', 'submitted_at', 'auto_score', 'total_points']
    list_filter = ['status']
    search_fields = ['student__email', 'exam__title']
    readonly_fields = [f.name for f in ExamAttempt._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        # attempt_number is the count of earlier attempts; removing rows would reuse a taken slot
        return False


@admin.register(ExamAnswer)
class ExamAnswerAdmin(admin.ModelAdmin):
    list_display = ['attempt', 'question', 'is_correct', 'points_awarded', 'updated_at']
    readonly_fields = [f.name for f in ExamAnswer._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ['attempt', 'action', 'created_at']
    list_filter = ['action']
    readonly_fields = ['attempt', 'action', 'metadata', 'created_at']

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
