# projects/models.py

from django.db import models
from users.models import User
from teams.models import Team


class ProjectStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'
    IN_PROGRESS = 'In Progress', 'In Progress'
    COMPLETED = 'Completed', 'Completed'


class Project(models.Model):
    title = models.CharField(max_length=150)
    description = models.TextField()
    status = models.CharField(max_length=20, choices=ProjectStatus.choices, default=ProjectStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        User,
        related_name='user_created_projects',
        on_delete=models.CASCADE
    )

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.title


class ProjectAssignment(models.Model):
    project = models.OneToOneField(
        Project,
        related_name='assignment',
        on_delete=models.CASCADE
    )
    team = models.ForeignKey(
        Team,
        related_name='team_assignments',
        on_delete=models.CASCADE
    )
    assigned_by = models.ForeignKey(
        User,
        related_name='user_assignments',
        on_delete=models.CASCADE
    )
    deadline = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Project '{self.project.title}' assigned to team '{self.team.team_name}'."
