# management/responses.py

from rest_framework.response import Response
from rest_framework import status as http_status


def envelope(message=None, status=http_status.HTTP_200_OK, success=True, **payload):
    """
    Ответ в едином формате {success, message, ...payload}.
    """
    data = {'success': success}
    if message is not None:
        data['message'] = message
    data.update(payload)
    return Response(data, status=status)


class EnvelopeListMixin:
    """
    Примесь для ListAPIView: заворачивает список в {success, <envelope_key>: [...]}.
    """
    envelope_key = 'results'

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return envelope(**{self.envelope_key: serializer.data, 'count': len(serializer.data)})


class EnvelopeRetrieveMixin:
    """
    Примесь для RetrieveAPIView: заворачивает объект в {success, <envelope_key>: {...}}.
    """
    envelope_key = 'result'

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return envelope(**{self.envelope_key: serializer.data})


def batch_envelope(message, successful_count, failed_count, details, **payload):
    """
    Ответ пакетной операции: 207 при частичной неудаче.
    """
    return envelope(
        message,
        status=http_status.HTTP_207_MULTI_STATUS if failed_count else http_status.HTTP_200_OK,
        success=not failed_count,
        successful_count=successful_count,
        failed_count=failed_count,
        details=details,
        **payload
    )
