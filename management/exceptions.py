# management/exceptions.py

import logging

from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def collect_messages(detail):
    """
    Собирает все сообщения об ошибках из detail (dict/list/str) в плоский список.
    """
    if isinstance(detail, dict):
        messages = []
        for value in detail.values():
            messages.extend(collect_messages(value))
        return messages

    if isinstance(detail, (list, tuple)):
        messages = []
        for value in detail:
            messages.extend(collect_messages(value))
        return messages

    return [str(detail)]


def envelope_exception_handler(exc, context):
    """
    Приводит ошибки DRF к формату {success: false, message, errors}.
    """
    response = exception_handler(exc, context)

    if response is None:
        return None

    errors = response.data
    message = ", ".join(collect_messages(errors))

    if response.status_code >= 500:
        logger.error("Request failed: %s", message)

    response.data = {
        'success': False,
        'message': message,
        'errors': errors,
    }

    return response
