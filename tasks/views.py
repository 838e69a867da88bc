# tasks/views.py

from management.base_access_views import (
    BaseAssignerAccessView,
    BaseAuthenticatedAccessView,
    BaseProjectManagerAccessView,
    BaseReviewerAccessView,
    BaseTeamLeaderAccessView,
    BaseTeamMemberAccessView,
    BaseTeamParticipantAccessView,
    BaseWorkViewerAccessView,
)
from management.responses import envelope, batch_envelope, EnvelopeListMixin, EnvelopeRetrieveMixin
from rest_framework.generics import CreateAPIView, ListAPIView, RetrieveAPIView, UpdateAPIView
from rest_framework.exceptions import PermissionDenied, NotFound
from rest_framework.filters import SearchFilter, OrderingFilter
from management.serializers import IdListSerializer
from users.serializers import UserShortSerializer
from management.utils import delete_with_counts
from projects.models import Project
from django.db.models import Q
from rest_framework import serializers, status
from users.utils import *
from .serializers import *
from .models import *
from . import workflow

TASK_SEARCH_FIELDS = ['title', 'description', 'status', 'assignment__project__title', 'assignment__team__team_name']
TASK_ORDERING_FIELDS = ['title', 'status', 'deadline', 'created_at', 'updated_at']
SUBTASK_SEARCH_FIELDS = ['title', 'description', 'status']
SUBTASK_ORDERING_FIELDS = ['title', 'status', 'deadline', 'created_at']


def get_reviewers(task):
    return [task.assignment.assigned_by] + list(task.team.team_leader.all())


# Базовая вью для списков задач с поиском и сортировкой
class BaseTaskListView(EnvelopeListMixin, ListAPIView):
    serializer_class = GetTaskSerializer
    envelope_key = 'tasks'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = TASK_SEARCH_FIELDS
    ordering_fields = TASK_ORDERING_FIELDS

    def get_project_tasks(self):
        return Task.objects.filter(
            assignment__project=self.kwargs['project_id']
        ).select_related('assignment__project', 'assignment__team', 'created_by', 'submitted_by')


# Базовая вью для списков подзадач с поиском и сортировкой
class BaseSubtaskListView(EnvelopeListMixin, ListAPIView):
    serializer_class = GetSubtaskSerializer
    envelope_key = 'subtasks'
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = SUBTASK_SEARCH_FIELDS
    ordering_fields = SUBTASK_ORDERING_FIELDS

    def get_task_subtasks(self):
        return Subtask.objects.filter(parent_task=self.kwargs['task_id']).select_related('parent_task', 'submitted_by')


# Вью для создания задачи менеджером в назначенном проекте
class CreateTaskView(BaseAssignerAccessView, CreateAPIView):
    serializer_class = CreateTaskSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['assignment'] = Project.objects.get(id=self.kwargs['project_id']).assignment
        return context

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        task = serializer.save()
        return envelope(
            "Task created successfully.",
            status=status.HTTP_201_CREATED,
            task=GetTaskSerializer(task).data
        )


# Вью для создания задачи лидером команды
class CreateTeamLeaderTaskView(BaseTeamLeaderAccessView, CreateTaskView):
    pass


# Вью для получения задач всех проектов, назначенных менеджером
class GetProjectManagerTasksView(BaseProjectManagerAccessView, BaseTaskListView):

    def get_queryset(self):
        return Task.objects.filter(
            assignment__assigned_by=self.request.user
        ).select_related('assignment__project', 'assignment__team', 'created_by', 'submitted_by')


# Вью для получения задач проекта (менеджер)
class GetProjectTasksView(BaseAssignerAccessView, BaseTaskListView):

    def get_queryset(self):
        return self.get_project_tasks()


# Вью для получения задач проекта (лидер команды)
class GetTeamLeaderProjectTasksView(BaseTeamLeaderAccessView, BaseTaskListView):

    def get_queryset(self):
        return self.get_project_tasks()


# Вью для получения задач проекта, порученных участнику или всей команде
class GetTeamMemberProjectTasksView(BaseTeamMemberAccessView, BaseTaskListView):

    def get_queryset(self):
        user = self.request.user
        return self.get_project_tasks().filter(Q(assignees=user) | Q(assignees__isnull=True)).distinct()


# Вью для получения задач, по которым лидер может создавать подзадачи (выборка по командам лидера)
class GetTasksForAssignmentView(BaseAuthenticatedAccessView, BaseTaskListView):

    def get_queryset(self):
        return Task.objects.filter(
            assignment__team__team_leader=self.request.user
        ).exclude(status=TaskStatus.COMPLETED).select_related('assignment__project', 'assignment__team')


# Вью для получения подробной информации о задаче
class GetTaskDetailsView(BaseWorkViewerAccessView, EnvelopeRetrieveMixin, RetrieveAPIView):
    serializer_class = GetTaskSerializer
    envelope_key = 'task'
    queryset = Task.objects.all()
    lookup_url_kwarg = 'task_id'


# Вью для изменения задачи
class UpdateTaskView(BaseAssignerAccessView, UpdateAPIView):
    serializer_class = UpdateTaskSerializer
    queryset = Task.objects.all()
    lookup_url_kwarg = 'task_id'

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        task = serializer.save()
        return envelope("Task updated successfully.", task=GetTaskSerializer(task).data)


# Вью для удаления выбранных задач
class DeleteTasksView(BaseProjectManagerAccessView):
    serializer_class = IdListSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data['ids']

        tasks = Task.objects.filter(id__in=ids, assignment__assigned_by=request.user)
        own_ids = list(tasks.values_list('id', flat=True))

        if not own_ids:
            log_user_action(
                user=request.user,
                action_name="Tasks",
                description=f"Project manager tried to delete tasks {ids}",
                status='Access denied'
            )
            raise PermissionDenied({'no_rights': 'None of the selected tasks belong to your projects.'})

        projects = list(Project.objects.filter(assignment__tasks__in=own_ids).distinct())
        counts = delete_with_counts(tasks, reason=f"Tasks {own_ids} deleted by {request.user.email}")

        for project in projects:
            workflow.sync_project_status(project)

        log_user_action(
            user=request.user,
            action_name="Tasks",
            description=f"Project manager deleted {counts['tasks']} task(s)"
        )

        return batch_envelope(
            f"{counts['tasks']} task(s) deleted successfully.",
            successful_count=counts['tasks'],
            failed_count=len(ids) - counts['tasks'],
            details=[{'id': task_id, 'success': task_id in own_ids} for task_id in ids],
            deleted_count=counts['tasks'],
            deleted_subtasks=counts['subtasks']
        )


# Вью для сдачи задачи (лидер команды или исполнитель)
class SubmitTaskView(BaseTeamParticipantAccessView):
    serializer_class = SubmitTaskSerializer

    def put(self, request, *args, **kwargs):
        task = Task.objects.get(id=self.kwargs['task_id'])

        if not (task.team.is_leader(request.user) or task.is_assigned(request.user)):
            log_user_action(
                user=request.user,
                action_name="Tasks",
                description=f"User tried to submit task «{task.title}»",
                status='Access denied'
            )
            raise PermissionDenied({'no_rights': 'You are not assigned to this task.'})

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        workflow.submit(task, request.user, **serializer.validated_data)

        log_user_action(
            user=request.user,
            action_name="Tasks",
            description=f"User submitted task «{task.title}»"
        )

        send_mail_notification(
            users=get_reviewers(task),
            header="Task submitted",
            text=f"Task «{task.title}» has been submitted for review."
        )

        return envelope("Task submitted successfully.", task=GetTaskSerializer(task).data)


# Вью для принятия задачи (менеджер или лидер команды)
class MarkTaskCompletedView(BaseReviewerAccessView):

    def put(self, request, *args, **kwargs):
        task = Task.objects.get(id=self.kwargs['task_id'])
        workflow.mark_completed(task)

        log_user_action(
            user=request.user,
            action_name="Tasks",
            description=f"User marked task «{task.title}» as completed"
        )

        send_mail_notification(
            users=[task.submitted_by],
            header="Task completed",
            text=f"Your work on task «{task.title}» has been accepted."
        )

        return envelope("Task marked as completed.", task=GetTaskSerializer(task).data)


# Вью для возврата задачи на доработку с отзывом
class MarkTaskPendingView(BaseReviewerAccessView):
    serializer_class = FeedbackSerializer

    def put(self, request, *args, **kwargs):
        task = Task.objects.get(id=self.kwargs['task_id'])
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        submitter = task.submitted_by
        workflow.mark_reassigned(task, serializer.validated_data['feedback'])

        log_user_action(
            user=request.user,
            action_name="Tasks",
            description=f"User sent task «{task.title}» back for rework"
        )

        send_mail_notification(
            users=[submitter] if submitter else list(task.assignees.all()),
            header="Task re-assigned",
            text=f"Task «{task.title}» was sent back for rework. Feedback: {task.feedback}"
        )

        return envelope("Task re-assigned with feedback.", task=GetTaskSerializer(task).data)


# Вью для получения данных назначения проекта (форма создания задачи)
class GetAssignmentContextView(BaseAssignerAccessView):

    def get(self, request, *args, **kwargs):
        assignment = Project.objects.get(id=self.kwargs['project_id']).assignment
        team = assignment.team

        return envelope(
            project={
                'id': assignment.project.id,
                'title': assignment.project.title,
                'description': assignment.project.description,
                'status': assignment.project.status,
            },
            team={
                'id': team.id,
                'team_name': team.team_name,
                'team_leader': UserShortSerializer(team.team_leader.all(), many=True).data,
                'members': UserShortSerializer(team.members.all(), many=True).data,
            },
            deadline=serializers.DateTimeField().to_representation(assignment.deadline)
        )


# Вью для получения подзадач задачи (лидер команды)
class GetTaskSubtasksView(BaseTeamLeaderAccessView, BaseSubtaskListView):

    def get_queryset(self):
        return self.get_task_subtasks()


# Вью для получения подзадач, порученных участнику
class GetTeamMemberSubtasksView(BaseTeamMemberAccessView, BaseSubtaskListView):

    def get_queryset(self):
        user = self.request.user
        return self.get_task_subtasks().filter(Q(assigned_to_all=True) | Q(assignees=user)).distinct()


# Вью для создания подзадачи
class CreateSubtaskView(BaseTeamLeaderAccessView, CreateAPIView):
    serializer_class = CreateSubtaskSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subtask = serializer.save()
        return envelope(
            "Subtask created successfully.",
            status=status.HTTP_201_CREATED,
            subtask=GetSubtaskSerializer(subtask).data
        )


# Вью для изменения подзадачи
class UpdateSubtaskView(BaseTeamLeaderAccessView, UpdateAPIView):
    serializer_class = UpdateSubtaskSerializer
    queryset = Subtask.objects.all()
    lookup_url_kwarg = 'subtask_id'

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        subtask = serializer.save()
        return envelope("Subtask updated successfully.", subtask=GetSubtaskSerializer(subtask).data)


# Вью для удаления выбранных подзадач (лидерство проверяется по каждой команде)
class DeleteSubtasksView(BaseAuthenticatedAccessView):
    serializer_class = IdListSerializer

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ids = serializer.validated_data['ids']

        subtasks = Subtask.objects.filter(id__in=ids).select_related('parent_task__assignment__team')
        found = {subtask.id: subtask for subtask in subtasks}
        missing = [subtask_id for subtask_id in ids if subtask_id not in found]

        if missing:
            raise NotFound({'not_found': f'Subtasks not found: {missing}.'})

        teams = {subtask.team.id: subtask.team for subtask in found.values()}
        if not all(team.is_leader(request.user) for team in teams.values()):
            log_user_action(
                user=request.user,
                action_name="Subtasks",
                description=f"User tried to delete subtasks {ids}",
                status='Access denied'
            )
            raise PermissionDenied({'no_rights': 'You must be the leader of every team the subtasks belong to.'})

        counts = delete_with_counts(subtasks, reason=f"Subtasks {ids} deleted by {request.user.email}")

        log_user_action(
            user=request.user,
            action_name="Subtasks",
            description=f"Team leader deleted {counts['subtasks']} subtask(s)"
        )

        return envelope(f"{counts['subtasks']} subtask(s) deleted successfully.", deleted_count=counts['subtasks'])


# Вью для принятия подзадачи лидером команды
class MarkSubtaskCompletedView(BaseTeamLeaderAccessView):

    def put(self, request, *args, **kwargs):
        subtask = Subtask.objects.get(id=self.kwargs['subtask_id'])
        workflow.mark_completed(subtask)

        log_user_action(
            user=request.user,
            action_name="Subtasks",
            description=f"Team leader marked subtask «{subtask.title}» as completed"
        )

        send_mail_notification(
            users=[subtask.submitted_by],
            header="Subtask completed",
            text=f"Your work on subtask «{subtask.title}» has been accepted."
        )

        return envelope("Subtask marked as completed.", subtask=GetSubtaskSerializer(subtask).data)


# Вью для возврата подзадачи на доработку с отзывом
class MarkSubtaskPendingView(BaseTeamLeaderAccessView):
    serializer_class = FeedbackSerializer

    def put(self, request, *args, **kwargs):
        subtask = Subtask.objects.get(id=self.kwargs['subtask_id'])
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        submitter = subtask.submitted_by
        workflow.mark_reassigned(subtask, serializer.validated_data['feedback'])

        log_user_action(
            user=request.user,
            action_name="Subtasks",
            description=f"Team leader sent subtask «{subtask.title}» back for rework"
        )

        send_mail_notification(
            users=[submitter],
            header="Subtask re-assigned",
            text=f"Subtask «{subtask.title}» was sent back for rework. Feedback: {subtask.feedback}"
        )

        return envelope("Subtask re-assigned with feedback.", subtask=GetSubtaskSerializer(subtask).data)


# Вью для сдачи подзадачи участником команды
class SubmitSubtaskView(BaseTeamMemberAccessView):
    serializer_class = SubmitWorkSerializer

    def put(self, request, *args, **kwargs):
        subtask = Subtask.objects.get(id=self.kwargs['subtask_id'])

        if not subtask.is_assigned(request.user):
            log_user_action(
                user=request.user,
                action_name="Subtasks",
                description=f"User tried to submit subtask «{subtask.title}»",
                status='Access denied'
            )
            raise PermissionDenied({'no_rights': 'You are not assigned to this subtask.'})

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        workflow.submit(subtask, request.user, **serializer.validated_data)

        log_user_action(
            user=request.user,
            action_name="Subtasks",
            description=f"User submitted subtask «{subtask.title}»"
        )

        send_mail_notification(
            users=list(subtask.team.team_leader.all()),
            header="Subtask submitted",
            text=f"Subtask «{subtask.title}» has been submitted for review."
        )

        return envelope("Subtask submitted successfully.", subtask=GetSubtaskSerializer(subtask).data)


# Вью для получения данных формы создания подзадачи
class GetSubtaskCreationContextView(BaseTeamLeaderAccessView):

    def get(self, request, *args, **kwargs):
        task = Task.objects.get(id=self.kwargs['task_id'])

        return envelope(
            task=GetTaskSerializer(task).data,
            members=UserShortSerializer(task.team.members.all(), many=True).data
        )


# Вью для получения данных формы изменения подзадачи
class GetSubtaskUpdateContextView(BaseTeamLeaderAccessView):

    def get(self, request, *args, **kwargs):
        subtask = Subtask.objects.get(id=self.kwargs['subtask_id'])

        return envelope(
            subtask=GetSubtaskSerializer(subtask).data,
            members=UserShortSerializer(subtask.team.members.all(), many=True).data
        )
