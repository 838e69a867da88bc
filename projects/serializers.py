# projects/serializers.py

from rest_framework.exceptions import NotFound, PermissionDenied
from users.serializers import UserShortSerializer
from rest_framework import serializers
from django.utils.timezone import now
from django.db import transaction
from tasks.models import TaskStatus
from teams.models import Team
from users.utils import *
from .models import *


def get_own_project(user, project_id, action):
    """
    Проект, созданный пользователем. Попытка доступа к чужому проекту записывается в журнал.
    """
    try:
        project = Project.objects.get(id=project_id)
    except (Project.DoesNotExist, ValueError, TypeError):
        raise NotFound({'not_found': 'Project not found.'})

    if project.created_by_id != user.id:
        log_user_action(
            user=user,
            action_name="Projects",
            description=f"User tried to {action} project «{project.title}»",
            status='Access denied'
        )
        raise PermissionDenied({'no_rights': 'You are not the creator of this project.'})

    return project


def validate_future_deadline(deadline):
    if deadline is None:
        raise serializers.ValidationError({'deadline': 'Deadline is required.'})

    if deadline <= now():
        raise serializers.ValidationError({'deadline': 'Deadline must be in the future.'})

    return deadline


def get_own_team(user, team_id):
    try:
        return Team.objects.get(id=team_id, created_by=user)
    except (Team.DoesNotExist, ValueError, TypeError):
        raise serializers.ValidationError({'team_id': 'Team not found.'})


def notify_team(team, header, text):
    send_mail_notification(
        users=list(team.team_leader.all()) + list(team.members.all()),
        header=header,
        text=text
    )


def assign_project(user, project, team, deadline):
    assignment = ProjectAssignment.objects.create(
        project=project,
        team=team,
        assigned_by=user,
        deadline=deadline
    )

    log_user_action(
        user=user,
        action_name="Projects",
        description=f"Project manager assigned project «{project.title}» to team «{team.team_name}»"
    )

    notify_team(
        team,
        header="New project",
        text=f"Project «{project.title}» has been assigned to your team «{team.team_name}»."
    )

    return assignment


# Сериализатор для создания проекта
class CreateProjectSerializer(serializers.ModelSerializer):
    team_id = serializers.IntegerField(required=False, allow_null=True, write_only=True)
    deadline = serializers.DateTimeField(required=False, allow_null=True, write_only=True)

    class Meta:
        model = Project
        fields = ['id', 'title', 'description', 'status', 'team_id', 'deadline']
        read_only_fields = ['id', 'status']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Title is required.')
        return value

    def validate_description(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Description is required.')
        return value

    def validate(self, data):
        user = self.context['request'].user

        if data.get('team_id') is not None:
            data['team'] = get_own_team(user, data['team_id'])
            validate_future_deadline(data.get('deadline'))

        return data

    @transaction.atomic
    def create(self, validated_data):
        user = self.context['request'].user
        team = validated_data.pop('team', None)
        deadline = validated_data.pop('deadline', None)
        validated_data.pop('team_id', None)

        project = Project.objects.create(created_by=user, **validated_data)

        log_user_action(
            user=user,
            action_name="Projects",
            description=f"Project manager created project «{project.title}»"
        )

        if team is not None:
            assign_project(user, project, team, deadline)

        return project


# Сериализатор для получения информации о проектах
class GetProjectSerializer(serializers.ModelSerializer):
    created_by = UserShortSerializer(read_only=True)
    team_id = serializers.SerializerMethodField()
    team_name = serializers.SerializerMethodField()
    deadline = serializers.SerializerMethodField()
    tasks_count = serializers.SerializerMethodField()
    completed_tasks_count = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            'id',
            'title',
            'description',
            'status',
            'created_by',
            'team_id',
            'team_name',
            'deadline',
            'tasks_count',
            'completed_tasks_count',
            'created_at',
            'updated_at',
        ]

    def get_assignment(self, obj):
        try:
            return obj.assignment
        except ProjectAssignment.DoesNotExist:
            return None

    def get_team_id(self, obj):
        assignment = self.get_assignment(obj)
        return assignment.team_id if assignment else None

    def get_team_name(self, obj):
        assignment = self.get_assignment(obj)
        return assignment.team.team_name if assignment else None

    def get_deadline(self, obj):
        assignment = self.get_assignment(obj)
        return serializers.DateTimeField().to_representation(assignment.deadline) if assignment else None

    def get_tasks_count(self, obj):
        assignment = self.get_assignment(obj)
        return assignment.tasks.count() if assignment else 0

    def get_completed_tasks_count(self, obj):
        assignment = self.get_assignment(obj)
        return assignment.tasks.filter(status=TaskStatus.COMPLETED).count() if assignment else 0


# Сериализатор для изменения информации о проекте
class UpdateProjectSerializer(serializers.ModelSerializer):
    deadline = serializers.DateTimeField(required=False, write_only=True)

    class Meta:
        model = Project
        fields = ['title', 'description', 'deadline']

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Title is required.')
        return value

    def validate_description(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Description is required.')
        return value

    def validate(self, data):
        if 'deadline' in data:
            if not ProjectAssignment.objects.filter(project=self.instance).exists():
                raise serializers.ValidationError({'deadline': 'Project is not assigned to a team.'})
            validate_future_deadline(data['deadline'])

        return data

    @transaction.atomic
    def update(self, instance, validated_data):
        user = self.context['request'].user
        deadline = validated_data.pop('deadline', None)

        instance = super().update(instance, validated_data)

        if deadline is not None:
            ProjectAssignment.objects.filter(project=instance).update(deadline=deadline)

        log_user_action(
            user=user,
            action_name="Projects",
            description=f"Project manager changed project «{instance.title}»"
        )

        return instance


# Сериализатор для назначения проекта команде
class AssignProjectSerializer(serializers.Serializer):
    team_id = serializers.IntegerField()
    deadline = serializers.DateTimeField()

    def validate(self, data):
        user = self.context['request'].user
        project = self.context['project']

        if ProjectAssignment.objects.filter(project=project).exists():
            raise serializers.ValidationError({'project_id': 'Project is already assigned to a team.'})

        data['team'] = get_own_team(user, data['team_id'])
        validate_future_deadline(data['deadline'])

        return data

    def save(self):
        user = self.context['request'].user
        project = self.context['project']

        return assign_project(user, project, self.validated_data['team'], self.validated_data['deadline'])


# Сериализатор назначения проекта (для ответа)
class ProjectAssignmentSerializer(serializers.ModelSerializer):
    project_id = serializers.IntegerField(source='project.id', read_only=True)
    project_title = serializers.CharField(source='project.title', read_only=True)
    team_id = serializers.IntegerField(source='team.id', read_only=True)
    team_name = serializers.CharField(source='team.team_name', read_only=True)

    class Meta:
        model = ProjectAssignment
        fields = ['id', 'project_id', 'project_title', 'team_id', 'team_name', 'deadline', 'created_at']
