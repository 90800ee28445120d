"""
Serializers for exams app (authoring, catalog views, attempts, answers).
Catalog views built for students never include option correctness.
"""
from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from exams.models import Exam, Question, QuestionOption, ExamAttempt, ExamAnswer


# ----- Catalog (exam + questions + options) -----

class QuestionOptionSerializer(serializers.ModelSerializer):
    isCorrect = serializers.BooleanField(source='is_correct', read_only=True)

    class Meta:
        model = QuestionOption
        fields = ['id', 'text', 'isCorrect', 'order']


class QuestionOptionPublicSerializer(serializers.ModelSerializer):
    """Student-facing option: no correctness flag."""

    class Meta:
        model = QuestionOption
        fields = ['id', 'text', 'order']


class QuestionSerializer(serializers.ModelSerializer):
    options = serializers.SerializerMethodField()

    class Meta:
        model = Question
        fields = ['id', 'type', 'text', 'points', 'order', 'options']

    def get_options(self, obj):
        if self.context.get('hide_answers'):
            return QuestionOptionPublicSerializer(obj.options.all(), many=True).data
        return QuestionOptionSerializer(obj.options.all(), many=True).data


class ExamSerializer(serializers.ModelSerializer):
    durationMinutes = serializers.IntegerField(source='duration_minutes', read_only=True)
    passingScore = serializers.DecimalField(source='passing_score', max_digits=5, decimal_places=2, read_only=True)
    startDate = serializers.DateTimeField(source='start_date', read_only=True)
    endDate = serializers.DateTimeField(source='end_date', read_only=True)
    maxAttempts = serializers.IntegerField(source='max_attempts', read_only=True)
    createdById = serializers.IntegerField(source='created_by_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    questionCount = serializers.SerializerMethodField()
    # present only where the queryset annotates attempt_count (staff listings)
    attemptCount = serializers.IntegerField(source='attempt_count', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'status', 'durationMinutes', 'passingScore',
            'startDate', 'endDate', 'maxAttempts', 'createdById', 'createdAt', 'questionCount', 'attemptCount',
        ]

    def get_questionCount(self, obj):
        count = getattr(obj, 'question_count', None)
        return count if count is not None else obj.questions.count()


def exam_catalog_data(exam, questions, hide_answers):
    """Exam plus ordered questions; hide_answers strips isCorrect from options."""
    data = ExamSerializer(exam).data
    data['questions'] = QuestionSerializer(
        questions, many=True, context={'hide_answers': hide_answers}
    ).data
    return data


# ----- Authoring -----

class QuestionOptionCreateSerializer(serializers.Serializer):
    text = serializers.CharField()
    isCorrect = serializers.BooleanField(default=False)
    order = serializers.IntegerField(min_value=0, required=False)


class QuestionCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=Question.TYPE_CHOICES)
    text = serializers.CharField()
    points = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=Decimal('0.01'))
    order = serializers.IntegerField(min_value=0, required=False)
    options = QuestionOptionCreateSerializer(many=True, required=False)

    def validate(self, attrs):
        options = attrs.get('options') or []
        if attrs['type'] == Question.TYPE_MCQ:
            if not options:
                raise serializers.ValidationError({'options': ['Multiple choice questions need at least one option.']})
            if not any(o['isCorrect'] for o in options):
                raise serializers.ValidationError({'options': ['At least one option must be correct.']})
        elif options:
            raise serializers.ValidationError({'options': ['Only multiple choice questions can have options.']})
        return attrs


class ExamCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    durationMinutes = serializers.IntegerField(min_value=1)
    maxAttempts = serializers.IntegerField(min_value=1, default=1)
    startDate = serializers.DateTimeField()
    endDate = serializers.DateTimeField()
    passingScore = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, allow_null=True
    )
    status = serializers.ChoiceField(choices=Exam.STATUS_CHOICES, default=Exam.STATUS_DRAFT)
    questions = QuestionCreateSerializer(many=True)

    def validate(self, attrs):
        if attrs['startDate'] >= attrs['endDate']:
            raise serializers.ValidationError({'endDate': ['End date must be after start date.']})
        return attrs

    def create(self, validated_data):
        questions_data = validated_data.pop('questions')
        with transaction.atomic():
            exam = Exam.objects.create(
                title=validated_data['title'],
                description=validated_data.get('description') or '',
                duration_minutes=validated_data['durationMinutes'],
                max_attempts=validated_data['maxAttempts'],
                start_date=validated_data['startDate'],
                end_date=validated_data['endDate'],
                passing_score=validated_data.get('passingScore'),
                status=validated_data['status'],
                created_by=validated_data['created_by'],
            )
            for i, q in enumerate(questions_data):
                question = Question.objects.create(
                    exam=exam,
                    type=q['type'],
                    text=q['text'],
                    points=q['points'],
                    order=q.get('order', i),
                )
                QuestionOption.objects.bulk_create([
                    QuestionOption(
                        question=question,
                        text=o['text'],
                        is_correct=o['isCorrect'],
                        order=o.get('order', j),
                    )
                    for j, o in enumerate(q.get('options') or [])
                ])
        return exam


# ----- Attempts & answers -----

class StartAttemptSerializer(serializers.Serializer):
    examId = serializers.IntegerField()


class SubmitAnswerSerializer(serializers.Serializer):
    questionId = serializers.IntegerField()
    textAnswer = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)
    selectedOptionIds = serializers.ListField(
        child=serializers.IntegerField(), required=False, allow_empty=True, default=list
    )


class ExamAnswerSerializer(serializers.ModelSerializer):
    attemptId = serializers.IntegerField(source='attempt_id', read_only=True)
    questionId = serializers.IntegerField(source='question_id', read_only=True)
    textAnswer = serializers.CharField(source='text_answer', read_only=True, allow_null=True)
    selectedOptionIds = serializers.JSONField(source='selected_option_ids', read_only=True)
    isCorrect = serializers.BooleanField(source='is_correct', read_only=True, allow_null=True)
    pointsAwarded = serializers.DecimalField(
        source='points_awarded', max_digits=8, decimal_places=2, read_only=True, allow_null=True
    )
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ExamAnswer
        fields = [
            'id', 'attemptId', 'questionId', 'textAnswer', 'selectedOptionIds',
            'isCorrect', 'pointsAwarded', 'updatedAt',
        ]


class ExamAttemptSerializer(serializers.ModelSerializer):
    examId = serializers.IntegerField(source='exam_id', read_only=True)
    examTitle = serializers.CharField(source='exam.title', read_only=True)
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    studentName = serializers.CharField(source='student.full_name', read_only=True)
    studentEmail = serializers.EmailField(source='student.email', read_only=True)
    durationMinutes = serializers.IntegerField(source='exam.duration_minutes', read_only=True)
    attemptNumber = serializers.IntegerField(source='attempt_number', read_only=True)
    startedAt = serializers.DateTimeField(source='started_at', read_only=True)
    submittedAt = serializers.DateTimeField(source='submitted_at', read_only=True, allow_null=True)
    totalPoints = serializers.DecimalField(source='total_points', max_digits=10, decimal_places=2, read_only=True)
    autoScore = serializers.DecimalField(
        source='auto_score', max_digits=10, decimal_places=2, read_only=True, allow_null=True
    )

    class Meta:
        model = ExamAttempt
        fields = [
            'id', 'examId', 'examTitle', 'durationMinutes', 'studentId', 'studentName', 'studentEmail',
            'attemptNumber', 'status',
            'startedAt', 'submittedAt', 'totalPoints', 'autoScore',
        ]


class ExamAttemptDetailSerializer(ExamAttemptSerializer):
    answers = ExamAnswerSerializer(many=True, read_only=True)

    class Meta(ExamAttemptSerializer.Meta):
        fields = ExamAttemptSerializer.Meta.fields + ['answers']
