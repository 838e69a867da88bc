# tasks/serializers.py

from users.serializers import UserShortSerializer
from rest_framework import serializers
from django.utils.timezone import now
from django.db import transaction
from users.utils import *
from .workflow import sync_project_status
from .models import *

ASSIGNED_TO_ALL = 'all'


def validate_future(deadline):
    if deadline <= now():
        raise serializers.ValidationError('Deadline must be in the future.')
    return deadline


def get_team_assignees(team, user_ids):
    """
    Исполнители должны быть участниками команды.
    """
    user_ids = list(dict.fromkeys(user_ids))
    assignees = list(team.members.filter(id__in=user_ids))

    if len(assignees) != len(user_ids):
        found = {assignee.id for assignee in assignees}
        missing = [user_id for user_id in user_ids if user_id not in found]
        raise serializers.ValidationError({'assignees': f'Users {missing} are not members of team «{team.team_name}».'})

    return assignees


def notify_assignees(assignees, team, header, text):
    send_mail_notification(
        users=assignees if assignees else list(team.members.all()),
        header=header,
        text=text
    )


# Поле исполнителей подзадачи: id пользователя, список id или "all"
class AssignedToField(serializers.Field):
    default_error_messages = {
        'invalid': 'assigned_to must be a user id, a list of user ids or "all".',
        'empty': 'At least one assignee is required.',
    }

    def to_internal_value(self, data):
        if isinstance(data, str) and data.strip().lower() == ASSIGNED_TO_ALL:
            return ASSIGNED_TO_ALL

        if not isinstance(data, list):
            data = [data]

        if not data:
            self.fail('empty')

        user_ids = []
        for value in data:
            if isinstance(value, bool):
                self.fail('invalid')
            try:
                user_ids.append(int(value))
            except (TypeError, ValueError):
                self.fail('invalid')

        return user_ids

    def to_representation(self, value):
        return value


# Сериализатор для создания задачи в назначенном проекте
class CreateTaskSerializer(serializers.ModelSerializer):
    assignees = serializers.ListField(child=serializers.IntegerField(), required=False, write_only=True)

    class Meta:
        model = Task
        fields = ['id', 'title', 'description', 'deadline', 'assignees']
        read_only_fields = ['id']

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

    def validate_deadline(self, value):
        return validate_future(value)

    def validate(self, data):
        assignment = self.context['assignment']
        data['assignees'] = get_team_assignees(assignment.team, data.get('assignees', []))
        return data

    @transaction.atomic
    def create(self, validated_data):
        user = self.context['request'].user
        assignment = self.context['assignment']
        assignees = validated_data.pop('assignees')

        task = Task.objects.create(assignment=assignment, created_by=user, **validated_data)
        task.assignees.set(assignees)

        sync_project_status(assignment.project)

        log_user_action(
            user=user,
            action_name="Tasks",
            description=f"User created task «{task.title}» in project «{assignment.project.title}»"
        )

        notify_assignees(
            assignees, assignment.team,
            header="New task",
            text=f"You have a new task «{task.title}» in project «{assignment.project.title}»."
        )

        return task


# Сериализатор для изменения задачи
class UpdateTaskSerializer(CreateTaskSerializer):

    def validate(self, data):
        if 'assignees' in data:
            data['assignees'] = get_team_assignees(self.instance.team, data['assignees'])
        return data

    def update(self, instance, validated_data):
        user = self.context['request'].user
        assignees = validated_data.pop('assignees', None)

        instance = super(CreateTaskSerializer, self).update(instance, validated_data)

        if assignees is not None:
            instance.assignees.set(assignees)

        log_user_action(
            user=user,
            action_name="Tasks",
            description=f"User changed task «{instance.title}»"
        )

        return instance


# Сериализатор для получения информации о задаче
class GetTaskSerializer(serializers.ModelSerializer):
    project_id = serializers.IntegerField(source='assignment.project.id', read_only=True)
    project_title = serializers.CharField(source='assignment.project.title', read_only=True)
    team_id = serializers.IntegerField(source='assignment.team.id', read_only=True)
    team_name = serializers.CharField(source='assignment.team.team_name', read_only=True)
    assignees = UserShortSerializer(many=True, read_only=True)
    assigned_to_all = serializers.SerializerMethodField()
    created_by = UserShortSerializer(read_only=True)
    submitted_by = UserShortSerializer(read_only=True)
    subtasks_count = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = [
            'id',
            'title',
            'description',
            'status',
            'deadline',
            'project_id',
            'project_title',
            'team_id',
            'team_name',
            'assignees',
            'assigned_to_all',
            'created_by',
            'git_hub_url',
            'context',
            'feedback',
            'submitted_by',
            'subtasks_count',
            'created_at',
            'updated_at',
        ]

    def get_assigned_to_all(self, obj):
        return not obj.assignees.exists()

    def get_subtasks_count(self, obj):
        return obj.subtasks.count()


# Сериализатор для сдачи задачи или подзадачи
class SubmitWorkSerializer(serializers.Serializer):
    git_hub_url = serializers.CharField(allow_blank=True)
    context = serializers.CharField(required=False, allow_blank=True, default='')


# Сериализатор для сдачи задачи: описание сделанного обязательно
class SubmitTaskSerializer(SubmitWorkSerializer):
    context = serializers.CharField(
        error_messages={
            'required': 'Context is required.',
            'blank': 'Context is required.',
        }
    )


# Сериализатор отзыва при возврате работы на доработку
class FeedbackSerializer(serializers.Serializer):
    feedback = serializers.CharField(required=False, allow_blank=True, default='')


# Сериализатор для создания подзадачи
class CreateSubtaskSerializer(serializers.ModelSerializer):
    parent_task_id = serializers.IntegerField(write_only=True)
    title = serializers.CharField(
        max_length=150,
        min_length=3,
        error_messages={'min_length': 'Title must be at least 3 characters long.'}
    )
    description = serializers.CharField(
        min_length=10,
        error_messages={'min_length': 'Description must be at least 10 characters long.'}
    )
    assigned_to = AssignedToField(write_only=True)

    class Meta:
        model = Subtask
        fields = ['id', 'parent_task_id', 'title', 'description', 'deadline', 'assigned_to']
        read_only_fields = ['id']

    def validate_deadline(self, value):
        return validate_future(value)

    def get_team(self, data):
        try:
            return Task.objects.get(id=data['parent_task_id']).team
        except Task.DoesNotExist:
            raise serializers.ValidationError({'parent_task_id': 'Task not found.'})

    def validate(self, data):
        if 'assigned_to' not in data:
            return data

        if data['assigned_to'] == ASSIGNED_TO_ALL:
            data['assigned_to_all'] = True
            data['assignees'] = []
        else:
            data['assigned_to_all'] = False
            data['assignees'] = get_team_assignees(self.get_team(data), data['assigned_to'])

        data.pop('assigned_to')
        return data

    @transaction.atomic
    def create(self, validated_data):
        user = self.context['request'].user
        parent_task = Task.objects.get(id=validated_data.pop('parent_task_id'))
        assignees = validated_data.pop('assignees')

        subtask = Subtask.objects.create(parent_task=parent_task, **validated_data)
        subtask.assignees.set(assignees)

        log_user_action(
            user=user,
            action_name="Subtasks",
            description=f"Team leader created subtask «{subtask.title}» for task «{parent_task.title}»"
        )

        notify_assignees(
            assignees, parent_task.team,
            header="New subtask",
            text=f"You have a new subtask «{subtask.title}» of task «{parent_task.title}»."
        )

        return subtask


# Сериализатор для изменения подзадачи
class UpdateSubtaskSerializer(CreateSubtaskSerializer):

    class Meta(CreateSubtaskSerializer.Meta):
        fields = ['id', 'title', 'description', 'deadline', 'assigned_to']

    def get_team(self, data):
        return self.instance.team

    def update(self, instance, validated_data):
        user = self.context['request'].user
        assignees = validated_data.pop('assignees', None)

        instance = super(CreateSubtaskSerializer, self).update(instance, validated_data)

        if assignees is not None:
            instance.assignees.set(assignees)

        log_user_action(
            user=user,
            action_name="Subtasks",
            description=f"Team leader changed subtask «{instance.title}»"
        )

        return instance


# Сериализатор для получения информации о подзадаче
class GetSubtaskSerializer(serializers.ModelSerializer):
    parent_task_id = serializers.IntegerField(source='parent_task.id', read_only=True)
    parent_task_title = serializers.CharField(source='parent_task.title', read_only=True)
    assignees = UserShortSerializer(many=True, read_only=True)
    assigned_to = serializers.SerializerMethodField()
    submitted_by = UserShortSerializer(read_only=True)

    class Meta:
        model = Subtask
        fields = [
            'id',
            'parent_task_id',
            'parent_task_title',
            'title',
            'description',
            'status',
            'deadline',
            'assigned_to',
            'assigned_to_all',
            'assignees',
            'git_hub_url',
            'context',
            'feedback',
            'submitted_by',
            'created_at',
            'updated_at',
        ]

    def get_assigned_to(self, obj):
        if obj.assigned_to_all:
            return ASSIGNED_TO_ALL
        return [assignee.id for assignee in obj.assignees.all()]
