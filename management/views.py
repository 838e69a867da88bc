# management/views.py

from rest_framework.generics import ListAPIView, RetrieveAPIView, RetrieveUpdateAPIView, UpdateAPIView
from .responses import envelope, batch_envelope, EnvelopeListMixin, EnvelopeRetrieveMixin
from rest_framework.exceptions import ValidationError, NotFound
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from rest_framework.filters import SearchFilter, OrderingFilter
from users.serializers import ActionTypesSerializer, GetUsersActionsSerializer
from .utils import CASCADE_LABELS, delete_with_counts
from users.models import User, UserType, Action_type, User_action
from projects.models import Project
from .base_access_views import BaseAdminAccessView
from .exceptions import collect_messages
from django.db.models import Q
from teams.models import Team
from .serializers import *
from users.utils import *

USER_SEARCH_FIELDS = ['first_name', 'last_name', 'email', 'user_type']
USER_ORDERING_FIELDS = ['first_name', 'last_name', 'email', 'user_type', 'date_joined', 'last_login']


def get_user_or_404(user_id):
    try:
        return User.objects.get(id=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound({'not_found': 'User not found.'})


# Базовая вью для списков пользователей в панели администратора
class BaseAdminUsersListView(BaseAdminAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = AdminUserSerializer
    envelope_key = 'users'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = USER_SEARCH_FIELDS
    ordering_fields = USER_ORDERING_FIELDS


# Вью для получения пользователей, не состоящих в командах
class GetAllUsersView(BaseAdminUsersListView):

    def get_queryset(self):
        return User.objects.filter(
            user_type__in=[UserType.USER, UserType.TEAM_LEADER],
            led_teams__isnull=True,
            member_teams__isnull=True
        ).order_by('id')


# Вью для получения руководителей проектов
class GetAllProjectManagersView(BaseAdminUsersListView):

    def get_queryset(self):
        return User.objects.filter(user_type=UserType.PROJECT_MANAGER).order_by('id')


# Вью для получения участников команд с их ролями
class GetAllTeamParticipantsView(BaseAdminUsersListView):
    serializer_class = AdminTeamParticipantSerializer

    def get_queryset(self):
        return User.objects.filter(
            Q(led_teams__isnull=False) | Q(member_teams__isnull=False)
        ).distinct().order_by('id')


# Вью для получения подробной информации о пользователе
class AdminUserDetailsView(BaseAdminAccessView, EnvelopeRetrieveMixin, RetrieveAPIView):
    serializer_class = AdminUserDetailsSerializer
    envelope_key = 'user'

    def get_object(self):
        return get_user_or_404(self.kwargs['user_id'])


# Вью для изменения пользователя администратором
class AdminEditUserView(BaseAdminAccessView, EnvelopeRetrieveMixin, RetrieveUpdateAPIView):
    serializer_class = EditUserSerializer
    envelope_key = 'user'

    def get_object(self):
        return get_user_or_404(self.kwargs['user_id'])

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return envelope("User updated successfully.", user=AdminUserSerializer(user).data)


# Вью для пакетного изменения пользователей
class UpdateUsersView(BaseAdminAccessView):

    def put(self, request):
        entries = request.data.get('users') if hasattr(request.data, 'get') else None

        if not isinstance(entries, list) or not entries:
            raise ValidationError({'users': "'users' array is required and cannot be empty."})

        details = []
        successful = 0

        for entry in entries:
            serializer = UpdateUserEntrySerializer(data=entry)

            if not serializer.is_valid():
                details.append({
                    'id': entry.get('id') if isinstance(entry, dict) else None,
                    'success': False,
                    'message': ", ".join(collect_messages(serializer.errors)),
                })
                continue

            user = serializer.save()
            successful += 1
            details.append({'id': user.id, 'success': True, 'message': 'Updated.'})

        log_user_action(
            user=request.user,
            action_name="User management",
            description=f"Admin updated {successful} of {len(entries)} user(s)",
            status='Success' if successful == len(entries) else 'Partial'
        )

        return batch_envelope(
            f"{successful} user(s) updated successfully.",
            successful_count=successful,
            failed_count=len(entries) - successful,
            details=details
        )


# Вью для пакетного удаления пользователей
class DeleteUsersView(BaseAdminAccessView):
    serializer_class = IdListSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data['ids']

        users = {user.id: user for user in User.objects.filter(id__in=ids)}
        details = []
        deletable = []

        for user_id in ids:
            user = users.get(user_id)

            if user is None:
                details.append({'id': user_id, 'success': False, 'reason': 'User not found'})
            elif user.id == request.user.id:
                details.append({'id': user_id, 'success': False, 'reason': 'Admin cannot delete self'})
            elif user.is_admin:
                details.append({'id': user_id, 'success': False, 'reason': 'Admin accounts cannot be deleted'})
            else:
                deletable.append(user_id)
                details.append({'id': user_id, 'success': True, 'reason': None})

        counts = {'users': 0}
        if deletable:
            counts = delete_with_counts(User.objects.filter(id__in=deletable), reason=f"Users deleted by {request.user.email}")

            log_user_action(
                user=request.user,
                action_name="User management",
                description=f"Admin deleted {counts['users']} user(s)"
            )

        return batch_envelope(
            f"{counts['users']} user(s) deleted successfully.",
            successful_count=counts['users'],
            failed_count=len(ids) - len(deletable),
            details=details,
            deleted_count=counts['users']
        )


# Вью для удаления руководителей проектов вместе с их проектами и командами
class DeleteProjectManagersView(BaseAdminAccessView):
    serializer_class = EmailListSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        skipped = []
        candidates = []

        for email in serializer.validated_data['emails']:
            try:
                validate_email(email)
            except DjangoValidationError:
                skipped.append({'email': email, 'reason': 'Invalid email format'})
                continue

            email = email.lower()

            if email == request.user.email.lower():
                skipped.append({'email': email, 'reason': 'Admin cannot delete self'})
                continue

            if email not in candidates:
                candidates.append(email)

        managers = []
        for email in candidates:
            user = User.objects.filter(email__iexact=email).first()

            if user is None:
                skipped.append({'email': email, 'reason': 'User not found'})
            elif not user.is_project_manager:
                skipped.append({'email': email, 'reason': 'User is not a Project Manager'})
            else:
                managers.append(user)

        counts = dict.fromkeys(CASCADE_LABELS.values(), 0)
        if managers:
            counts = delete_with_counts(
                User.objects.filter(id__in=[manager.id for manager in managers]),
                reason=f"Project managers deleted by {request.user.email}"
            )

            log_user_action(
                user=request.user,
                action_name="User management",
                description=f"Admin deleted project managers {', '.join(manager.email for manager in managers)}"
            )

        return batch_envelope(
            f"{counts['users']} project manager(s) deleted successfully.",
            successful_count=counts['users'],
            failed_count=len(skipped),
            details=skipped,
            processed_emails=[manager.email for manager in managers],
            deleted_projects=counts['projects'],
            deleted_teams=counts['teams'],
            deleted_assignments=counts['assignments'],
            deleted_tasks=counts['tasks'],
            deleted_subtasks=counts['subtasks'],
            deleted_users=counts['users']
        )


# Вью для блокировки/активации пользовательских аккаунтов
class ChangeActivationView(BaseAdminAccessView, UpdateAPIView):
    serializer_class = ChangeActivationSerializer

    def get_object(self):
        user = get_user_or_404(self.request.data.get('user_id'))

        if user.id == self.request.user.id:
            raise ValidationError({'self_block': 'You cannot change the activation of your own account.'})

        return user

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return envelope(
            "Account activated." if user.is_active else "Account blocked.",
            user=serializer.data
        )


# Вью для получения проекта с задачами и подзадачами
class AdminProjectTasksDetailsView(BaseAdminAccessView, EnvelopeRetrieveMixin, RetrieveAPIView):
    serializer_class = AdminProjectTasksSerializer
    envelope_key = 'project'
    queryset = Project.objects.all()
    lookup_url_kwarg = 'project_id'


# Вью для получения подробной информации о команде
class AdminTeamDetailsView(BaseAdminAccessView, EnvelopeRetrieveMixin, RetrieveAPIView):
    serializer_class = AdminTeamDetailsSerializer
    envelope_key = 'team'
    queryset = Team.objects.all()
    lookup_url_kwarg = 'team_id'


# Вью для получения типов действий пользователей в системе
class GetActionTypesView(BaseAdminAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = ActionTypesSerializer
    envelope_key = 'action_types'
    queryset = Action_type.objects.all()


# Вью для получения действий пользователя определенного типа
class GetUserActionsView(BaseAdminAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = GetUsersActionsSerializer
    envelope_key = 'actions'
    filter_backends = [OrderingFilter]
    ordering_fields = ['date_of_issue', 'status']

    def get_queryset(self):
        return User_action.objects.filter(
            user=self.kwargs['user_id'],
            type=self.kwargs['type_id']
        ).select_related('user', 'type').order_by('-date_of_issue')
