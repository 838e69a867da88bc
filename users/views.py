# users/views.py

from rest_framework.generics import CreateAPIView, GenericAPIView, RetrieveAPIView, UpdateAPIView
from management.responses import envelope
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView
from .utils import log_user_action
from rest_framework import status
from .serializers import *
from .models import *


# Вью для регистрации пользователей
class UserRegistrationView(CreateAPIView):
    permission_classes = [AllowAny]
    queryset = User.objects.all()
    serializer_class = UserRegistrationSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return envelope(
            "User registration successful! Please check your email to verify your account.",
            status=status.HTTP_201_CREATED,
            user_id=user.id
        )


# Вью для регистрации администраторов
class AdminRegistrationView(UserRegistrationView):
    serializer_class = AdminRegistrationSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return envelope("Admin registered successfully.", status=status.HTTP_201_CREATED, user_id=user.id)


# Вью для подтверждения почты
class VerifyEmailView(GenericAPIView):
    permission_classes = [AllowAny]
    serializer_class = VerifyEmailSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return envelope("Email verified successfully! You can now log in.")


# Вью для входа пользователей в систему
class UserLoginView(GenericAPIView):
    permission_classes = [AllowAny]
    serializer_class = UserLoginSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.save()
        return envelope("Login successful!", **data)


# Вью для выхода пользователей из системы
class UserLogoutView(APIView):
    def post(self, request):
        log_user_action(
            user=request.user,
            action_name="Accounts",
            description="User logged out"
        )
        return envelope("Logout recorded.")


# Вью для получения информации для профиля пользователя
class GetUserProfileInfo(RetrieveAPIView):
    serializer_class = UserProfileSerializer

    def get_object(self):
        return self.request.user

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return envelope(user=serializer.data)


# Вью для изменения информации о пользователе в профиле
class ChangeUserProfileInfoView(UpdateAPIView):
    serializer_class = UserProfileSerializer

    def get_object(self):
        return self.request.user

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return envelope("Profile updated successfully.", user=serializer.data)


# Вью для смены пароля
class ChangePasswordView(GenericAPIView):
    serializer_class = ChangePasswordSerializer

    def put(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        strength = serializer.save()
        return envelope("Password updated successfully.", password_strength=strength)


# Вью для проверки пользователя и формирования письма для восстановления пароля
class PasswordResetView(GenericAPIView):
    permission_classes = [AllowAny]
    serializer_class = PasswordResetSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return envelope("Password reset link has been sent to your email.")


# Вью для подтверждения восстановления и смены пароля
class PasswordResetConfirmView(GenericAPIView):
    serializer_class = ConfirmPasswordResetSerializer
    permission_classes = [AllowAny]

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context.update({
            'uidb64': self.kwargs.get('uidb64'),
            'token': self.kwargs.get('token'),
        })
        return context

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return envelope("Password has been reset successfully.")
