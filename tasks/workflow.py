# tasks/workflow.py

"""
Жизненный цикл статуса задач и подзадач.

    Pending / Re Assigned --(сдача: GitHub URL + контекст)--> In Progress
    In Progress --(принято)--> Completed
    In Progress / Completed --(возврат с отзывом)--> Re Assigned

Функции работают одинаково для Task и Subtask и сохраняют объект.
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import ValidationError
from projects.models import ProjectStatus
from .models import Task, TaskStatus, github_url_validator

REASSIGNABLE_STATUSES = (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)


def validate_github_url(git_hub_url):
    git_hub_url = (git_hub_url or '').strip()

    if not git_hub_url:
        raise ValidationError({'git_hub_url': 'GitHub URL is required.'})

    try:
        github_url_validator(git_hub_url)
    except DjangoValidationError:
        raise ValidationError({'git_hub_url': 'Invalid GitHub URL.'})

    return git_hub_url


def submit(item, user, git_hub_url, context=''):
    """
    Сдача работы исполнителем: статус меняется на In Progress.
    """
    if item.status == TaskStatus.COMPLETED:
        raise ValidationError({'status': 'Cannot submit work that is already completed.'})

    item.git_hub_url = validate_github_url(git_hub_url)
    item.context = (context or '').strip()
    item.submitted_by = user
    item.feedback = ''
    item.status = TaskStatus.IN_PROGRESS
    item.save()

    sync_project_status_for(item)
    return item


def mark_completed(item):
    """
    Принятие сданной работы лидером или менеджером.
    """
    if item.status != TaskStatus.IN_PROGRESS:
        raise ValidationError({
            'status': f"Only work 'In Progress' can be marked as completed. Current status: {item.status}."
        })

    item.status = TaskStatus.COMPLETED
    item.save()

    sync_project_status_for(item)
    return item


def mark_reassigned(item, feedback):
    """
    Возврат работы на доработку: результат сдачи очищается, отзыв сохраняется.
    """
    feedback = (feedback or '').strip()

    if not feedback:
        raise ValidationError({'feedback': 'Feedback is required.'})

    if item.status not in REASSIGNABLE_STATUSES:
        raise ValidationError({
            'status': f"Only work 'In Progress' or 'Completed' can be sent back. Current status: {item.status}."
        })

    item.status = TaskStatus.RE_ASSIGNED
    item.feedback = feedback
    item.git_hub_url = ''
    item.context = ''
    item.submitted_by = None
    item.save()

    sync_project_status_for(item)
    return item


def sync_project_status(project):
    """
    Статус проекта следует за задачами: все выполнены - Completed, иначе In Progress.
    Проект без задач сохраняет свой статус.
    """
    statuses = list(Task.objects.filter(assignment__project=project).values_list('status', flat=True))

    if not statuses:
        return project

    if all(status == TaskStatus.COMPLETED for status in statuses):
        new_status = ProjectStatus.COMPLETED
    else:
        new_status = ProjectStatus.IN_PROGRESS

    if project.status != new_status:
        project.status = new_status
        project.save(update_fields=['status', 'updated_at'])

    return project


def sync_project_status_for(item):
    if isinstance(item, Task):
        sync_project_status(item.project)
