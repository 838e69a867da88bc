# teams/views.py

from rest_framework.generics import CreateAPIView, ListAPIView, RetrieveAPIView, UpdateAPIView
from management.base_access_views import (
    BaseAuthenticatedAccessView,
    BaseProjectManagerAccessView,
    BaseTeamParticipantAccessView,
)
from management.responses import envelope, EnvelopeListMixin, EnvelopeRetrieveMixin
from management.utils import delete_with_counts, reset_unassigned_projects
from rest_framework.exceptions import PermissionDenied, NotFound
from rest_framework.filters import SearchFilter, OrderingFilter
from management.serializers import IdListSerializer
from users.serializers import UserShortSerializer
from projects.models import ProjectAssignment
from django.db.models import Q
from rest_framework import status
from users.utils import *
from .serializers import *
from .models import Team


def get_visible_team(request, team_id):
    """
    Команда, доступная создавшему ее менеджеру и ее участникам.
    """
    try:
        team = Team.objects.get(id=team_id)
    except Team.DoesNotExist:
        raise NotFound({'not_found': 'Team not found.'})

    if team.created_by_id != request.user.id and not team.is_participant(request.user):
        raise PermissionDenied({'no_rights': 'You do not have access to this team.'})

    return team


# Вью для создания команды
class CreateTeamView(BaseProjectManagerAccessView, CreateAPIView):
    serializer_class = CreateTeamSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = serializer.save()
        return envelope(
            "Team created successfully.",
            status=status.HTTP_201_CREATED,
            team=GetTeamSerializer(team).data
        )


# Вью для изменения команды
class EditTeamView(BaseProjectManagerAccessView, UpdateAPIView):
    serializer_class = EditTeamSerializer

    def get_object(self):
        try:
            team = Team.objects.get(id=self.kwargs['team_id'])
        except Team.DoesNotExist:
            raise NotFound({'not_found': 'Team not found.'})

        if team.created_by_id != self.request.user.id:
            log_user_action(
                user=self.request.user,
                action_name="Teams",
                description=f"Project manager tried to edit team «{team.team_name}»",
                status='Access denied'
            )
            raise PermissionDenied({'no_rights': 'Only the creator of the team can edit it.'})

        return team

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object(), data=request.data)
        serializer.is_valid(raise_exception=True)
        team = serializer.save()
        return envelope("Team updated successfully.", team=GetTeamSerializer(team).data)


# Вью для удаления выбранных команд
class DeleteTeamsView(BaseProjectManagerAccessView):
    serializer_class = IdListSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data['ids']

        teams = Team.objects.filter(id__in=ids)
        own_teams = teams.filter(created_by=request.user)

        if teams.count() != len(ids) or own_teams.count() != len(ids):
            log_user_action(
                user=request.user,
                action_name="Teams",
                description=f"Project manager tried to delete teams {ids}",
                status='Access denied'
            )
            raise PermissionDenied({'no_rights': 'You can only delete teams you created.'})

        team_names = list(own_teams.values_list('team_name', flat=True))
        project_ids = list(ProjectAssignment.objects.filter(team__in=own_teams).values_list('project_id', flat=True))

        counts = delete_with_counts(own_teams, reason=f"Teams {ids} deleted by {request.user.email}")
        reset_unassigned_projects(project_ids)

        log_user_action(
            user=request.user,
            action_name="Teams",
            description=f"Project manager deleted teams {', '.join(team_names)}"
        )

        return envelope(
            f"{counts['teams']} team(s) deleted successfully.",
            deleted_count=counts['teams'],
            deleted_assignments=counts['assignments'],
            deleted_tasks=counts['tasks'],
            deleted_subtasks=counts['subtasks']
        )


# Вью для получения команд менеджера
class GetProjectManagerTeamsView(BaseProjectManagerAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = GetTeamSerializer
    envelope_key = 'teams'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ['team_name', 'team_leader__first_name', 'team_leader__last_name', 'team_leader__email']
    ordering_fields = ['team_name', 'created_at', 'updated_at']

    def get_queryset(self):
        return Team.objects.filter(created_by=self.request.user)


# Вью для получения информации о команде (доступ проверяет get_visible_team)
class GetTeamDataView(BaseAuthenticatedAccessView, EnvelopeRetrieveMixin, RetrieveAPIView):
    serializer_class = GetTeamSerializer
    envelope_key = 'team'

    def get_object(self):
        return get_visible_team(self.request, self.kwargs['team_id'])


# Вью для получения проектов команды (доступ проверяет get_visible_team)
class GetTeamProjectsView(BaseAuthenticatedAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = TeamProjectSerializer
    envelope_key = 'projects'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ['project__title', 'project__description', 'project__status']
    ordering_fields = ['project__title', 'project__status', 'deadline', 'created_at']

    def get_queryset(self):
        team = get_visible_team(self.request, self.kwargs['team_id'])
        return team.team_assignments.select_related('project', 'assigned_by')


# Вью для получения пользователей, доступных для формирования команды
class GetAvailableUsersView(BaseProjectManagerAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = UserShortSerializer
    envelope_key = 'users'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ['first_name', 'last_name', 'email']
    ordering_fields = ['first_name', 'last_name', 'email']

    def get_queryset(self):
        return get_team_builders().filter(is_verified=True)


# Вью для получения участников команды
class GetTeamMembersView(BaseTeamParticipantAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = TeamParticipantSerializer
    envelope_key = 'members'

    def get_team(self):
        return Team.objects.get(id=self.kwargs['team_id'])

    def get_queryset(self):
        team = self.get_team()
        return User.objects.filter(Q(led_teams=team) | Q(member_teams=team)).distinct().order_by('id')

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['team'] = self.get_team()
        return context


# Вью для получения команд, которыми руководит пользователь (выборка по текущему пользователю)
class GetLedTeamsView(BaseAuthenticatedAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = GetTeamSerializer
    envelope_key = 'teams'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ['team_name']
    ordering_fields = ['team_name', 'created_at']

    def get_queryset(self):
        return self.request.user.led_teams.all()


# Вью для получения команд, в которых состоит пользователь (выборка по текущему пользователю)
class GetMemberTeamsView(BaseAuthenticatedAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = GetTeamSerializer
    envelope_key = 'teams'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ['team_name']
    ordering_fields = ['team_name', 'created_at']

    def get_queryset(self):
        return self.request.user.member_teams.all()
