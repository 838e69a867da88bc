# users/urls.py

from rest_framework_simplejwt.views import TokenRefreshView
from django.urls import path
from .views import *


urlpatterns = [
    path('registration/', UserRegistrationView.as_view(), name='user-registration'),
    path('admin/registration/', AdminRegistrationView.as_view(), name='admin-registration'),
    path('verify-email/', VerifyEmailView.as_view(), name='verify-email'),
    path('login/', UserLoginView.as_view(), name='user-login'),
    path('logout/', UserLogoutView.as_view(), name='user-logout'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('get-user-profile-info/', GetUserProfileInfo.as_view(), name='get-user-profile-info'),
    path('change-user-profile-info/', ChangeUserProfileInfoView.as_view(), name='change-user-profile-info'),
    path('profile/change-password/', ChangePasswordView.as_view(), name='change-password'),
    path('password-reset/', PasswordResetView.as_view(), name='password-reset'),
    path('password-reset-confirm/<uidb64>/<token>/', PasswordResetConfirmView.as_view(), name='password-reset-confirm'),
]
