import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Exam',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('duration_minutes', models.PositiveIntegerField(help_text='Duration in minutes')),
                ('passing_score', models.DecimalField(blank=True, decimal_places=2, help_text='Percentage needed to pass', max_digits=5, null=True, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('PUBLISHED', 'Published'), ('ARCHIVED', 'Archived')], db_index=True, default='DRAFT', max_length=20)),
                ('start_date', models.DateTimeField()),
                ('end_date', models.DateTimeField()),
                ('max_attempts', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(db_column='created_by_id', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_exams', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Exam',
                'verbose_name_plural': 'Exams',
                'db_table': 'exams',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['start_date'], name='exams_start_d_6a1f0c_idx'),
                    models.Index(fields=['end_date'], name='exams_end_dat_3b7e21_idx'),
                    models.Index(fields=['created_by', 'status'], name='exams_created_9d4a55_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('max_attempts__gte', 1)), name='exam_max_attempts_gte_1'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Question',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('MCQ', 'Multiple Choice'), ('OPEN_ENDED', 'Open Ended'), ('SHORT_ANSWER', 'Short Answer')], db_index=True, max_length=20)),
                ('text', models.TextField()),
                ('points', models.DecimalField(decimal_places=2, max_digits=8, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('order', models.PositiveIntegerField(default=0)),
                ('exam', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='questions', to='exams.exam')),
            ],
            options={
                'verbose_name': 'Question',
                'verbose_name_plural': 'Questions',
                'db_table': 'questions',
                'ordering': ['exam', 'order', 'id'],
                'indexes': [
                    models.Index(fields=['exam', 'order'], name='questions_exam_id_2c8f1e_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('points__gt', 0)), name='question_points_gt_0'),
                ],
            },
        ),
        migrations.CreateModel(
            name='QuestionOption',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('text', models.TextField()),
                ('is_correct', models.BooleanField(default=False)),
                ('order', models.PositiveIntegerField(default=0)),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='options', to='exams.question')),
            ],
            options={
                'verbose_name': 'Question Option',
                'verbose_name_plural': 'Question Options',
                'db_table': 'question_options',
                'ordering': ['question', 'order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='ExamAttempt',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('attempt_number', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('IN_PROGRESS', 'In Progress'), ('SUBMITTED', 'Submitted')], db_index=True, default='IN_PROGRESS', max_length=20)),
                ('started_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('submitted_at', models.DateTimeField(blank=True, null=True)),
                ('total_points', models.DecimalField(decimal_places=2, max_digits=10)),
                ('auto_score', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('exam', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='attempts', to='exams.exam')),
                ('student', models.ForeignKey(limit_choices_to={'role': 'STUDENT'}, on_delete=django.db.models.deletion.CASCADE, related_name='exam_attempts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Exam Attempt',
                'verbose_name_plural': 'Exam Attempts',
                'db_table': 'exam_attempts',
                'ordering': ['-started_at', '-id'],
                'indexes': [
                    models.Index(fields=['student', 'exam'], name='exam_attemp_student_5e0b7a_idx'),
                    models.Index(fields=['exam', 'status'], name='exam_attemp_exam_id_a41c9d_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('exam', 'student', 'attempt_number'), name='unique_exam_student_attempt_number'),
                    models.CheckConstraint(condition=models.Q(('attempt_number__gte', 1)), name='exam_attempt_number_gte_1'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ExamAnswer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('text_answer', models.TextField(blank=True, null=True)),
                ('selected_option_ids', models.JSONField(blank=True, default=list)),
                ('is_correct', models.BooleanField(blank=True, null=True)),
                ('points_awarded', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('attempt', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='exams.examattempt')),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='answers', to='exams.question')),
            ],
            options={
                'verbose_name': 'Exam Answer',
                'verbose_name_plural': 'Exam Answers',
                'db_table': 'exam_answers',
                'ordering': ['question__order', 'question_id'],
                'constraints': [
                    models.UniqueConstraint(fields=('attempt', 'question'), name='unique_attempt_question_answer'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ActivityLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('EXAM_STARTED', 'Exam Started'), ('ANSWER_SAVED', 'Answer Saved'), ('EXAM_SUBMITTED', 'Exam Submitted')], db_index=True, max_length=30)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('attempt', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activity_logs', to='exams.examattempt')),
            ],
            options={
                'verbose_name': 'Activity Log',
                'verbose_name_plural': 'Activity Logs',
                'db_table': 'activity_logs',
                'ordering': ['attempt', 'id'],
                'indexes': [
                    models.Index(fields=['attempt', 'action'], name='activity_lo_attempt_7f3e90_idx'),
                ],
            },
        ),
    ]
