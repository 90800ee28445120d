"""
Serializers for accounts app
"""
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from django.contrib.auth import get_user_model

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """User serializer for API responses"""
    fullName = serializers.CharField(source='full_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'fullName', 'role']
        read_only_fields = ['id', 'email', 'role']


class LoginSerializer(serializers.Serializer):
    """Login serializer"""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate(self, attrs):
        email = attrs.get('email')
        password = attrs.get('password')

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise AuthenticationFailed('Invalid email or password.')

        if not user.check_password(password):
            raise AuthenticationFailed('Invalid email or password.')

        if not user.is_active:
            raise AuthenticationFailed('User account is disabled.')

        attrs['user'] = user
        return attrs


class RegisterSerializer(serializers.Serializer):
    """Self-registration: students and teachers only."""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6, style={'input_type': 'password'})
    fullName = serializers.CharField(min_length=2, max_length=255)
    role = serializers.ChoiceField(
        choices=[User.ROLE_TEACHER, User.ROLE_STUDENT],
        default=User.ROLE_STUDENT,
    )

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('This email is already registered.')
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
            full_name=validated_data['fullName'],
            role=validated_data['role'],
        )
