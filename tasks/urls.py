# tasks/urls.py

from django.urls import path
from .views import *

urlpatterns = [
    # Руководитель проекта
    path('project/<int:project_id>/create-task/', CreateTaskView.as_view(), name='create-task'),
    path('project/<int:project_id>/tasks/', GetProjectTasksView.as_view(), name='project-tasks'),
    path('project/<int:project_id>/assignment-context/', GetAssignmentContextView.as_view(), name='assignment-context'),
    path('tasks/get-my-tasks/', GetProjectManagerTasksView.as_view(), name='get-project-manager-tasks'),
    path('tasks/delete/', DeleteTasksView.as_view(), name='delete-tasks'),
    path('task/<int:task_id>/get-details/', GetTaskDetailsView.as_view(), name='get-task-details'),
    path('task/<int:task_id>/change-info/', UpdateTaskView.as_view(), name='change-task-info'),
    path('task/<int:task_id>/mark-completed/', MarkTaskCompletedView.as_view(), name='mark-task-completed'),
    path('task/<int:task_id>/mark-pending/', MarkTaskPendingView.as_view(), name='mark-task-pending'),
    path('task/<int:task_id>/submit/', SubmitTaskView.as_view(), name='submit-task'),

    # Лидер команды
    path('team-leader/project/<int:project_id>/tasks/', GetTeamLeaderProjectTasksView.as_view(), name='team-leader-project-tasks'),
    path('team-leader/project/<int:project_id>/create-task/', CreateTeamLeaderTaskView.as_view(), name='team-leader-create-task'),
    path('team-leader/tasks-for-assignment/', GetTasksForAssignmentView.as_view(), name='tasks-for-assignment'),
    path('task/<int:task_id>/subtasks/', GetTaskSubtasksView.as_view(), name='task-subtasks'),
    path('task/<int:task_id>/subtask-context/', GetSubtaskCreationContextView.as_view(), name='subtask-creation-context'),
    path('subtasks/create/', CreateSubtaskView.as_view(), name='create-subtask'),
    path('subtasks/delete/', DeleteSubtasksView.as_view(), name='delete-subtasks'),
    path('subtask/<int:subtask_id>/change-info/', UpdateSubtaskView.as_view(), name='change-subtask-info'),
    path('subtask/<int:subtask_id>/update-context/', GetSubtaskUpdateContextView.as_view(), name='subtask-update-context'),
    path('subtask/<int:subtask_id>/mark-completed/', MarkSubtaskCompletedView.as_view(), name='mark-subtask-completed'),
    path('subtask/<int:subtask_id>/mark-pending/', MarkSubtaskPendingView.as_view(), name='mark-subtask-pending'),

    # Участник команды
    path('team-member/project/<int:project_id>/tasks/', GetTeamMemberProjectTasksView.as_view(), name='team-member-project-tasks'),
    path('team-member/task/<int:task_id>/subtasks/', GetTeamMemberSubtasksView.as_view(), name='team-member-subtasks'),
    path('subtask/<int:subtask_id>/submit/', SubmitSubtaskView.as_view(), name='submit-subtask'),
]
