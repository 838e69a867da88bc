# management/permissions.py

from rest_framework.permissions import BasePermission
from rest_framework.exceptions import NotFound
from projects.models import Project, ProjectAssignment
from tasks.models import Task, Subtask
from teams.models import Team


def lookup(model, object_id, name):
    try:
        return model.objects.get(id=object_id)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound({'not_found': f'{name} not found.'})


def get_reference(view, request, key):
    """
    Идентификатор объекта из url или из тела запроса.
    """
    value = view.kwargs.get(key)
    if value is not None:
        return value

    data = request.data if hasattr(request.data, 'get') else {}
    return data.get(key)


def get_assignment(view, request):
    """
    Функция для получения назначения проекта (проект + команда) из url или тела запроса
    через project_id, task_id, subtask_id или parent_task_id.
    """
    subtask_id = get_reference(view, request, 'subtask_id')
    if subtask_id is not None:
        return lookup(Subtask, subtask_id, 'Subtask').parent_task.assignment

    for key in ('task_id', 'parent_task_id'):
        task_id = get_reference(view, request, key)
        if task_id is not None:
            return lookup(Task, task_id, 'Task').assignment

    project_id = get_reference(view, request, 'project_id')
    if project_id is not None:
        project = lookup(Project, project_id, 'Project')
        try:
            return project.assignment
        except ProjectAssignment.DoesNotExist:
            return None

    return None


def get_team(view, request):
    """
    Функция для получения команды: напрямую через team_id или через назначение проекта.
    """
    team_id = get_reference(view, request, 'team_id')
    if team_id is not None and view.kwargs.get('team_id') is not None:
        return lookup(Team, team_id, 'Team')

    assignment = get_assignment(view, request)
    if assignment is not None:
        return assignment.team

    if team_id is not None:
        return lookup(Team, team_id, 'Team')

    return None


class IsAdmin(BasePermission):
    message = 'Forbidden: Admin access required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin)


class IsProjectManager(BasePermission):
    message = 'Forbidden: User is not a Project Manager.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_project_manager)


class IsAssigner(BasePermission):
    """
    Разрешает доступ только менеджеру, который назначил проект команде.
    """
    message = 'Forbidden: You are not the Project Manager of this assignment.'

    def has_permission(self, request, view):
        if not IsProjectManager().has_permission(request, view):
            return False

        assignment = get_assignment(view, request)

        if assignment is None:
            return False

        return assignment.assigned_by_id == request.user.id


class IsTeamLeader(BasePermission):
    """
    Разрешает доступ только лидерам команды, к которой относится объект запроса.
    """
    message = 'Forbidden: Not team leader.'

    def has_permission(self, request, view):
        team = get_team(view, request)

        if team is None:
            return False

        return team.is_leader(request.user)


class IsTeamMember(BasePermission):
    """
    Разрешает доступ только участникам команды.
    """
    message = 'Forbidden: You are not a member of the assigned team.'

    def has_permission(self, request, view):
        team = get_team(view, request)

        if team is None:
            return False

        return team.is_member(request.user)


class IsTeamParticipant(BasePermission):
    """
    Разрешает доступ лидерам и участникам команды.
    """
    message = 'Forbidden: You are not part of this team.'

    def has_permission(self, request, view):
        team = get_team(view, request)

        if team is None:
            return False

        return team.is_participant(request.user)


class CanReview(BasePermission):
    """
    Разрешает доступ, если пользователь является назначившим менеджером или лидером команды.
    """
    message = 'Forbidden: Only the assigning Project Manager or the team leader can review this work.'

    def has_permission(self, request, view):
        if IsAssigner().has_permission(request, view):
            return True

        return IsTeamLeader().has_permission(request, view)


class CanViewWork(BasePermission):
    """
    Разрешает просмотр назначившему менеджеру и участникам команды.
    """
    message = 'Forbidden: You do not have access to this work.'

    def has_permission(self, request, view):
        if IsAssigner().has_permission(request, view):
            return True

        return IsTeamParticipant().has_permission(request, view)
