# management/utils.py

import logging

from projects.models import Project, ProjectStatus

logger = logging.getLogger(__name__)

CASCADE_LABELS = {
    'users.User': 'users',
    'teams.Team': 'teams',
    'projects.Project': 'projects',
    'projects.ProjectAssignment': 'assignments',
    'tasks.Task': 'tasks',
    'tasks.Subtask': 'subtasks',
}


def delete_with_counts(queryset, reason):
    """
    Удаляет объекты вместе с каскадом и возвращает количество удаленных записей по моделям.
    """
    _, per_model = queryset.delete()
    counts = {key: per_model.get(label, 0) for label, key in CASCADE_LABELS.items()}

    logger.info(
        "%s: deleted %s",
        reason,
        ", ".join(f"{key}={count}" for key, count in counts.items() if count) or "nothing"
    )

    return counts


def reset_unassigned_projects(project_ids):
    """
    Проекты, потерявшие назначение, возвращаются в статус Pending.
    """
    return Project.objects.filter(
        id__in=project_ids,
        assignment__isnull=True
    ).update(status=ProjectStatus.PENDING)
