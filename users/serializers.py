# users/serializers.py

from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from django.contrib.auth.tokens import default_token_generator
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework.validators import UniqueValidator
from django.utils.encoding import force_bytes
from rest_framework import serializers
from django.utils.timezone import now
from django.conf import settings
from .tokens import email_verification_token
from .models import *
from .utils import *


def send_verification_mail(user):
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = email_verification_token.make_token(user)
    verification_link = f"{settings.FRONTEND_URL}/verify-email/{uid}/{token}/"

    send_mail_notification(
        users=[user],
        header="Verify your email",
        text=f"Hello {user.first_name}, confirm your email by following the link: {verification_link}",
        always=True
    )


def get_user_from_uid(uidb64):
    try:
        uid = urlsafe_base64_decode(uidb64).decode()
        return User.objects.get(pk=uid)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        raise serializers.ValidationError({'bad_url': 'Invalid or broken link.'})


# Краткая информация о пользователе для вложения в другие ответы
class UserShortSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'first_name', 'last_name', 'email', 'profile_pic', 'user_type']


# Сериализатор для регистрации пользователя
class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        error_messages={'min_length': 'Password must be at least 6 characters long.'}
    )
    email = serializers.EmailField(
        validators=[UniqueValidator(queryset=User.objects.all(), message="Email is already registered", lookup='iexact')]
    )
    contact = serializers.CharField(required=False, allow_blank=True, max_length=20)

    class Meta:
        model = User
        fields = ('id', 'first_name', 'last_name', 'email', 'password', 'contact')
        read_only_fields = ('id',)

    def validate_email(self, value):
        return value.lower()

    def create(self, validated_data):
        password = validated_data.pop('password')

        user = User(**validated_data)
        user.user_type = UserType.USER
        user.set_password(password)
        user.save()

        log_user_action(
            user=user,
            action_name="Accounts",
            description="User created an account"
        )

        send_verification_mail(user)

        return user


# Сериализатор для регистрации администратора
class AdminRegistrationSerializer(UserRegistrationSerializer):
    registration_key = serializers.CharField(write_only=True)

    class Meta(UserRegistrationSerializer.Meta):
        fields = UserRegistrationSerializer.Meta.fields + ('registration_key',)

    def validate_registration_key(self, value):
        expected = settings.ADMIN_REGISTRATION_KEY

        if not expected or value != expected:
            raise serializers.ValidationError('Invalid admin registration key.')
        return value

    def create(self, validated_data):
        validated_data.pop('registration_key')
        password = validated_data.pop('password')

        user = User(**validated_data)
        user.user_type = UserType.ADMIN
        user.is_verified = True
        user.set_password(password)
        user.save()

        log_user_action(
            user=user,
            action_name="Accounts",
            description="Admin account created"
        )

        return user


# Сериализатор для подтверждения почты
class VerifyEmailSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()

    def validate(self, data):
        user = get_user_from_uid(data['uid'])

        if user.is_verified:
            raise serializers.ValidationError({'already_verified': 'Email is already verified.'})

        if not email_verification_token.check_token(user, data['token']):
            raise serializers.ValidationError({'wrong_token': 'Verification link is invalid or has expired.'})

        data['user'] = user
        return data

    def save(self):
        user = self.validated_data['user']
        user.is_verified = True
        user.save(update_fields=['is_verified'])

        log_user_action(
            user=user,
            action_name="Accounts",
            description="User verified the email"
        )

        return user


# Сериализатор для входа пользователя в систему
class UserLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        email = data.get('email').lower()
        password = data.get('password')

        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise serializers.ValidationError({'credentials': 'Invalid email or password.'})

        if not user.check_password(password):
            raise serializers.ValidationError({'credentials': 'Invalid email or password.'})

        if not user.is_active:
            log_user_action(
                user=user,
                action_name="Accounts",
                description="User tried to log in",
                status='Access denied'
            )
            raise serializers.ValidationError({'blocked': 'Account is temporarily blocked.'})

        if not user.is_verified:
            send_verification_mail(user)
            raise serializers.ValidationError({
                'not_verified': 'Email is not verified. A new verification link has been sent to your email.'
            })

        data['user'] = user

        return data

    def create(self, validated_data):
        user = validated_data['user']

        user.last_login = now()
        user.save(update_fields=['last_login'])

        refresh_token = RefreshToken.for_user(user)

        log_user_action(
            user=user,
            action_name="Accounts",
            description="User logged in"
        )

        return {
            'refresh_token': str(refresh_token),
            'access_token': str(refresh_token.access_token),
            'user': {
                'id': user.id,
                'email': user.email,
                'first_name': user.first_name,
                'last_name': user.last_name,
                'contact': user.contact,
                'profile_pic': user.profile_pic,
                'user_type': user.user_type,
                'user_roles': get_user_roles(user),
                'notifications_status': user.notifications_status,
            }
        }


def get_user_roles(user):
    """
    Роли пользователя в командах: лидер и/или участник.
    """
    roles = []
    if user.led_teams.exists():
        roles.append("TeamLeader")
    if user.member_teams.exists():
        roles.append("TeamMember")
    return roles


# Сериализатор для профиля пользователя (изменения данных о пользователе)
class UserProfileSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(
        validators=[UniqueValidator(queryset=User.objects.all(), message="User with this email already exists.", lookup='iexact')]
    )
    user_roles = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'first_name', 'last_name', 'email', 'contact', 'profile_pic',
                  'notifications_status', 'user_type', 'user_roles', 'is_verified', 'date_joined', 'last_login']
        read_only_fields = ['id', 'user_type', 'is_verified', 'date_joined', 'last_login']

    def get_user_roles(self, obj):
        return get_user_roles(obj)

    def validate_email(self, value):
        return value.lower()

    def update(self, instance, validated_data):
        user = self.context['request'].user
        fields_changed = False

        for field in validated_data:
            if getattr(instance, field) != validated_data[field]:
                fields_changed = True
                break

        if fields_changed:
            instance = super().update(instance, validated_data)

            log_user_action(
                user=user,
                action_name="Accounts",
                description="User changed the account data"
            )

        return instance


# Сериализатор для смены пароля в профиле
class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)
    confirm_password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = self.context['request'].user
        current_password = data.get('current_password')
        new_password = data.get('new_password')

        if len(new_password) < 6:
            raise serializers.ValidationError({'new_password': 'New password must be at least 6 characters long.'})

        if current_password == new_password:
            raise serializers.ValidationError({'same_password': 'New password cannot be the same as the current password.'})

        if new_password != data.get('confirm_password'):
            raise serializers.ValidationError({'confirm_password': 'Passwords do not match.'})

        if not user.check_password(current_password):
            log_user_action(
                user=user,
                action_name="Accounts",
                description="User tried to change the password",
                status='Wrong password'
            )
            raise serializers.ValidationError({'wrong_password': 'Incorrect current password.'})

        return data

    def save(self):
        user = self.context['request'].user
        new_password = self.validated_data['new_password']

        user.set_password(new_password)
        user.save(update_fields=['password'])

        log_user_action(
            user=user,
            action_name="Accounts",
            description="User changed the password"
        )

        _, label = password_strength(new_password)
        return label


# Сериализатор проверки пользователя и формирования письма для восстановления пароля
class PasswordResetSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value):
        if not User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('User with this email was not found.')
        return value

    def save(self):
        email = self.validated_data['email']
        user = User.objects.get(email__iexact=email)
        token = default_token_generator.make_token(user)
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        reset_link = f"{settings.FRONTEND_URL}/password-reset-confirm/{uid}/{token}/"

        send_mail_notification(
            users=[user],
            header="Password reset",
            text=f"Follow the link to reset your password: {reset_link}",
            always=True
        )


# Сериализатор для подтверждения восстановления и смены пароля
class ConfirmPasswordResetSerializer(serializers.Serializer):
    new_password = serializers.CharField(
        write_only=True,
        min_length=6,
        error_messages={'min_length': 'New password must be at least 6 characters long.'}
    )

    def save(self):
        user = get_user_from_uid(self.context.get('uidb64'))

        if not default_token_generator.check_token(user, self.context.get('token')):
            raise serializers.ValidationError({'wrong_token': 'Password reset link is invalid or has expired.'})

        user.set_password(self.validated_data['new_password'])
        user.save()

        log_user_action(
            user=user,
            action_name="Accounts",
            description="User reset the password"
        )

        return user


# Сериализатор для получения типов действий пользователей в системе
class ActionTypesSerializer(serializers.ModelSerializer):
    class Meta:
        model = Action_type
        fields = ['id', 'name']


# Сериализатор для получения действий пользователей в системе
class GetUsersActionsSerializer(serializers.ModelSerializer):
    email = serializers.CharField(source='user.email', read_only=True)
    action_type_name = serializers.CharField(source='type.name', read_only=True)

    class Meta:
        model = User_action
        fields = ['id', 'date_of_issue', 'email', 'action_type_name', 'description', 'status']
