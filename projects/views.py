# projects/views.py

from rest_framework.generics import CreateAPIView, ListAPIView, RetrieveAPIView, UpdateAPIView
from management.responses import envelope, batch_envelope, EnvelopeListMixin, EnvelopeRetrieveMixin
from management.utils import delete_with_counts, reset_unassigned_projects
from rest_framework.exceptions import PermissionDenied, NotFound
from management.base_access_views import BaseProjectManagerAccessView
from rest_framework.filters import SearchFilter, OrderingFilter
from management.serializers import IdListSerializer
from rest_framework import status
from users.utils import *
from .serializers import *
from .models import *

PROJECT_SEARCH_FIELDS = ['title', 'description', 'status', 'assignment__team__team_name']
PROJECT_ORDERING_FIELDS = ['title', 'status', 'created_at', 'updated_at', 'assignment__deadline']


# Вью для создания проекта
class CreateProjectView(BaseProjectManagerAccessView, CreateAPIView):
    serializer_class = CreateProjectSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        project = serializer.save()
        return envelope(
            "Project created successfully.",
            status=status.HTTP_201_CREATED,
            project=GetProjectSerializer(project).data
        )


# Вью для получения проектов менеджера
class GetProjectManagerProjectsView(BaseProjectManagerAccessView, EnvelopeListMixin, ListAPIView):
    serializer_class = GetProjectSerializer
    envelope_key = 'projects'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = PROJECT_SEARCH_FIELDS
    ordering_fields = PROJECT_ORDERING_FIELDS

    def get_queryset(self):
        return Project.objects.filter(created_by=self.request.user).select_related('created_by')


# Вью для получения проектов менеджера, не назначенных командам
class GetUnassignedProjectsView(GetProjectManagerProjectsView):

    def get_queryset(self):
        return super().get_queryset().filter(assignment__isnull=True)


# Вью для получения проекта для изменения
class GetProjectForUpdateView(BaseProjectManagerAccessView, EnvelopeRetrieveMixin, RetrieveAPIView):
    serializer_class = GetProjectSerializer
    envelope_key = 'project'

    def get_object(self):
        return get_own_project(self.request.user, self.kwargs['project_id'], 'open for update')


# Вью для изменения информации о проекте
class UpdateProjectView(BaseProjectManagerAccessView, UpdateAPIView):
    serializer_class = UpdateProjectSerializer

    def get_object(self):
        return get_own_project(self.request.user, self.kwargs['project_id'], 'change')

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        project = serializer.save()
        return envelope("Project updated successfully.", project=GetProjectSerializer(project).data)


# Вью для назначения проекта команде
class AssignProjectView(BaseProjectManagerAccessView):
    serializer_class = AssignProjectSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['project'] = get_own_project(self.request.user, self.kwargs['project_id'], 'assign')
        return context

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        assignment = serializer.save()
        return envelope(
            "Project assigned successfully.",
            status=status.HTTP_201_CREATED,
            assignment=ProjectAssignmentSerializer(assignment).data
        )


# Вью для снятия назначения с выбранных проектов
class UnassignProjectsView(BaseProjectManagerAccessView):
    serializer_class = IdListSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data['ids']

        assignments = ProjectAssignment.objects.filter(project__in=ids, assigned_by=request.user)
        project_ids = list(assignments.values_list('project_id', flat=True))

        if not project_ids:
            raise NotFound({'not_found': 'No assignments found for the selected projects.'})

        titles = list(Project.objects.filter(id__in=project_ids).values_list('title', flat=True))

        counts = delete_with_counts(assignments, reason=f"Projects {project_ids} unassigned by {request.user.email}")
        reset_unassigned_projects(project_ids)

        log_user_action(
            user=request.user,
            action_name="Projects",
            description=f"Project manager unassigned projects {', '.join(titles)}"
        )

        return batch_envelope(
            f"{counts['assignments']} project(s) unassigned successfully.",
            successful_count=counts['assignments'],
            failed_count=len(ids) - counts['assignments'],
            details=[{'id': project_id, 'success': project_id in project_ids} for project_id in ids],
            deleted_tasks=counts['tasks'],
            deleted_subtasks=counts['subtasks']
        )


# Вью для удаления выбранных проектов
class DeleteProjectsView(BaseProjectManagerAccessView):
    serializer_class = IdListSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data['ids']

        projects = Project.objects.filter(id__in=ids, created_by=request.user)
        own_ids = list(projects.values_list('id', flat=True))

        if not own_ids:
            log_user_action(
                user=request.user,
                action_name="Projects",
                description=f"Project manager tried to delete projects {ids}",
                status='Access denied'
            )
            raise PermissionDenied({'no_rights': 'None of the selected projects belong to you.'})

        titles = list(projects.values_list('title', flat=True))
        counts = delete_with_counts(projects, reason=f"Projects {own_ids} deleted by {request.user.email}")

        log_user_action(
            user=request.user,
            action_name="Projects",
            description=f"Project manager deleted projects {', '.join(titles)}"
        )

        return batch_envelope(
            f"{counts['projects']} project(s) deleted successfully.",
            successful_count=counts['projects'],
            failed_count=len(ids) - counts['projects'],
            details=[{'id': project_id, 'success': project_id in own_ids} for project_id in ids],
            deleted_count=counts['projects'],
            deleted_tasks=counts['tasks'],
            deleted_subtasks=counts['subtasks']
        )
