# users/utils.py

import logging
import re

from .models import *
from django.core.mail import send_mail
from django.conf import settings

logger = logging.getLogger(__name__)

PASSWORD_STRENGTH_LABELS = ["Very Weak", "Weak", "Fair", "Good", "Strong"]


def log_user_action(user, action_name, description, status='Success'):
    """
    Функция для записи действий пользователей в системе в таблицу User_action.
    """
    action_type, _ = Action_type.objects.get_or_create(name=action_name)

    User_action.objects.create(
        type=action_type,
        user=user,
        description=description,
        status=status
    )


def send_mail_notification(users, header, text, always=False):
    """
    Функция для отправки сообщения на почту указанных пользователей.
    Письма об аккаунте (always=True) уходят независимо от настроек уведомлений.
    """
    for user in users:
        if user is None:
            continue
        if always or user.notifications_status:
            send_mail(
                header,
                text,
                settings.EMAIL_HOST_USER,
                [user.email],
                fail_silently=False,
            )
            logger.debug("Mail '%s' sent to %s", header, user.email)


def password_strength(password):
    """
    Оценка надежности пароля по количеству классов символов.

    Возвращает пару (баллы 0..5, название уровня).
    """
    if not password:
        return 0, "None"

    strength = 0
    if len(password) >= 8:
        strength += 1
    if re.search(r'[A-Z]', password):
        strength += 1
    if re.search(r'[a-z]', password):
        strength += 1
    if re.search(r'[0-9]', password):
        strength += 1
    if re.search(r'[^A-Za-z0-9]', password):
        strength += 1

    if strength == 0:
        return 0, "None"
    return strength, PASSWORD_STRENGTH_LABELS[strength - 1]
