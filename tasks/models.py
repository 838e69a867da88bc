# tasks/models.py

from django.core.validators import RegexValidator
from projects.models import ProjectAssignment
from django.db import models
from users.models import User


class TaskStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'
    IN_PROGRESS = 'In Progress', 'In Progress'
    COMPLETED = 'Completed', 'Completed'
    RE_ASSIGNED = 'Re Assigned', 'Re Assigned'


github_url_validator = RegexValidator(
    regex=r'^(https?://)?(www\.)?github\.com/[A-Za-z0-9_-]+(/[A-Za-z0-9_.-]+)?/?$',
    message='Invalid GitHub URL.'
)


class WorkItem(models.Model):
    """
    Общие поля задачи и подзадачи: описание работы и результат сдачи.
    """
    title = models.CharField(max_length=150)
    description = models.TextField()
    status = models.CharField(max_length=20, choices=TaskStatus.choices, default=TaskStatus.PENDING)
    deadline = models.DateTimeField()
    git_hub_url = models.CharField(max_length=255, blank=True, validators=[github_url_validator])
    context = models.TextField(blank=True)
    feedback = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['id']


class Task(WorkItem):
    assignment = models.ForeignKey(
        ProjectAssignment,
        related_name='tasks',
        on_delete=models.CASCADE
    )
    assignees = models.ManyToManyField(
        User,
        related_name='assigned_tasks',
        blank=True
    )
    created_by = models.ForeignKey(
        User,
        related_name='user_created_tasks',
        null=True,
        blank=True,
        on_delete=models.SET_NULL
    )
    submitted_by = models.ForeignKey(
        User,
        related_name='submitted_tasks',
        null=True,
        blank=True,
        on_delete=models.SET_NULL
    )

    @property
    def project(self):
        return self.assignment.project

    @property
    def team(self):
        return self.assignment.team

    def is_assigned(self, user):
        """
        Задача без исполнителей поручена всей команде.
        """
        if self.assignees.exists():
            return self.assignees.filter(id=user.id).exists()
        return self.team.is_member(user)

    def __str__(self):
        return f"Task '{self.title}' in project '{self.project.title}'."


class Subtask(WorkItem):
    parent_task = models.ForeignKey(
        Task,
        related_name='subtasks',
        on_delete=models.CASCADE
    )
    assignees = models.ManyToManyField(
        User,
        related_name='assigned_subtasks',
        blank=True
    )
    assigned_to_all = models.BooleanField(default=False)
    submitted_by = models.ForeignKey(
        User,
        related_name='submitted_subtasks',
        null=True,
        blank=True,
        on_delete=models.SET_NULL
    )

    @property
    def team(self):
        return self.parent_task.team

    def is_assigned(self, user):
        if self.assigned_to_all:
            return self.team.is_member(user)
        return self.assignees.filter(id=user.id).exists()

    def __str__(self):
        return f"Subtask '{self.title}' of task '{self.parent_task.title}'."
