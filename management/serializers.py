# management/serializers.py

from users.serializers import UserShortSerializer
from projects.models import Project, ProjectAssignment
from users.models import User, UserType
from rest_framework import serializers
from tasks.models import Task, Subtask
from teams.models import Team
from users.utils import *

EDITABLE_USER_TYPES = (UserType.USER, UserType.PROJECT_MANAGER, UserType.TEAM_LEADER)


# Сериализатор списка идентификаторов для пакетных операций
class IdListSerializer(serializers.Serializer):
    ids = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=False,
        error_messages={'empty': 'No ids provided.'}
    )

    def validate_ids(self, value):
        return list(dict.fromkeys(value))


# Сериализатор списка почтовых адресов для удаления руководителей проектов
class EmailListSerializer(serializers.Serializer):
    emails = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        allow_empty=False,
        error_messages={'empty': "'emails' array is required and cannot be empty."}
    )


def get_team_roles(user):
    """
    Команды пользователя с его ролью в каждой из них.
    """
    teams = []
    for team in user.led_teams.all():
        teams.append({'team_id': team.id, 'team_name': team.team_name, 'role': "TeamLeader"})
    for team in user.member_teams.all():
        teams.append({'team_id': team.id, 'team_name': team.team_name, 'role': "TeamMember"})
    return teams


# Сериализатор для получения пользователей в панели администратора
class AdminUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'first_name', 'last_name', 'email', 'contact', 'profile_pic', 'user_type',
                  'is_active', 'is_verified', 'date_joined', 'last_login']


# Сериализатор для получения участников команд с их ролями
class AdminTeamParticipantSerializer(AdminUserSerializer):
    teams = serializers.SerializerMethodField()

    class Meta(AdminUserSerializer.Meta):
        fields = AdminUserSerializer.Meta.fields + ['teams']

    def get_teams(self, obj):
        return get_team_roles(obj)


# Сериализатор для получения подробной информации о пользователе
class AdminUserDetailsSerializer(AdminUserSerializer):
    notifications_status = serializers.BooleanField(read_only=True)
    projects = serializers.SerializerMethodField()
    teams = serializers.SerializerMethodField()

    class Meta(AdminUserSerializer.Meta):
        fields = AdminUserSerializer.Meta.fields + ['notifications_status', 'projects', 'teams']

    def get_projects(self, obj):
        if not obj.is_project_manager:
            return []

        projects = []
        for project in obj.user_created_projects.all():
            assignment = ProjectAssignment.objects.filter(project=project).select_related('team').first()
            projects.append({
                'project_id': project.id,
                'title': project.title,
                'status': project.status,
                'team_id': assignment.team.id if assignment else None,
                'team_name': assignment.team.team_name if assignment else None,
            })
        return projects

    def get_teams(self, obj):
        if obj.is_project_manager:
            return [
                {'team_id': team.id, 'team_name': team.team_name, 'role': "Creator"}
                for team in obj.created_teams.all()
            ]
        return get_team_roles(obj)


# Сериализатор для изменения пользователя администратором
class EditUserSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(required=False)
    user_type = serializers.ChoiceField(choices=EDITABLE_USER_TYPES, required=False)
    password = serializers.CharField(
        write_only=True,
        required=False,
        min_length=6,
        error_messages={'min_length': 'Password must be at least 6 characters long.'}
    )

    class Meta:
        model = User
        fields = ['id', 'first_name', 'last_name', 'email', 'contact', 'user_type', 'password']
        read_only_fields = ['id']

    def validate_email(self, value):
        value = value.lower()

        if User.objects.filter(email__iexact=value).exclude(id=self.instance.id).exists():
            raise serializers.ValidationError('User with this email already exists.')
        return value

    def validate(self, data):
        if self.instance.is_admin and 'user_type' in data:
            raise serializers.ValidationError({'user_type': 'The type of an admin account cannot be changed.'})
        return data

    def update(self, instance, validated_data):
        user = self.context['request'].user
        password = validated_data.pop('password', None)

        for field, value in validated_data.items():
            setattr(instance, field, value)

        if password:
            instance.set_password(password)

        instance.save()

        log_user_action(
            user=user,
            action_name="User management",
            description=f"Admin edited the account of {instance.email}"
        )

        return instance


# Сериализатор одной записи пакетного изменения пользователей
class UpdateUserEntrySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    first_name = serializers.CharField(max_length=150, required=False)
    last_name = serializers.CharField(max_length=150, required=False)
    contact = serializers.CharField(max_length=20, required=False, allow_blank=True)
    password = serializers.CharField(
        required=False,
        allow_blank=True,
        min_length=6,
        error_messages={'min_length': 'Password must be at least 6 characters long.'}
    )

    def validate_id(self, value):
        try:
            return User.objects.get(id=value)
        except User.DoesNotExist:
            raise serializers.ValidationError('User not found.')

    def save(self):
        instance = self.validated_data['id']
        data = dict(self.validated_data)
        password = data.pop('password', '')
        data.pop('id')

        for field, value in data.items():
            setattr(instance, field, value)

        if password:
            instance.set_password(password)

        instance.save()
        return instance


# Сериализатор для блокировки/активации пользовательских аккаунтов
class ChangeActivationSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'is_active']
        read_only_fields = ['id', 'email', 'is_active']

    def update(self, instance, validated_data):
        user = self.context['request'].user

        instance.is_active = not instance.is_active
        instance.save(update_fields=['is_active'])

        log_user_action(
            user=user,
            action_name="User management",
            description=f"Admin {'activated' if instance.is_active else 'blocked'} the account of {instance.email}"
        )

        send_mail_notification(
            users=[instance],
            header="Account access changed",
            text="Your account has been activated." if instance.is_active else "Your account has been blocked.",
            always=True
        )

        return instance


# Сериализатор подзадачи для отчета администратора
class AdminSubtaskSerializer(serializers.ModelSerializer):
    assignees = UserShortSerializer(many=True, read_only=True)
    submitted_by = UserShortSerializer(read_only=True)

    class Meta:
        model = Subtask
        fields = ['id', 'title', 'description', 'status', 'deadline', 'assigned_to_all', 'assignees',
                  'git_hub_url', 'context', 'feedback', 'submitted_by', 'created_at', 'updated_at']


# Сериализатор задачи с подзадачами для отчета администратора
class AdminTaskSerializer(serializers.ModelSerializer):
    assignees = UserShortSerializer(many=True, read_only=True)
    submitted_by = UserShortSerializer(read_only=True)
    subtasks = AdminSubtaskSerializer(many=True, read_only=True)

    class Meta:
        model = Task
        fields = ['id', 'title', 'description', 'status', 'deadline', 'assignees', 'git_hub_url',
                  'context', 'feedback', 'submitted_by', 'subtasks', 'created_at', 'updated_at']


# Сериализатор проекта с задачами для отчета администратора
class AdminProjectTasksSerializer(serializers.ModelSerializer):
    created_by = UserShortSerializer(read_only=True)
    team = serializers.SerializerMethodField()
    deadline = serializers.SerializerMethodField()
    tasks = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ['id', 'title', 'description', 'status', 'created_by', 'team', 'deadline', 'tasks', 'created_at']

    def get_assignment(self, obj):
        return ProjectAssignment.objects.filter(project=obj).select_related('team').first()

    def get_team(self, obj):
        assignment = self.get_assignment(obj)
        if assignment is None:
            return None
        return {'team_id': assignment.team.id, 'team_name': assignment.team.team_name}

    def get_deadline(self, obj):
        assignment = self.get_assignment(obj)
        return serializers.DateTimeField().to_representation(assignment.deadline) if assignment else None

    def get_tasks(self, obj):
        tasks = Task.objects.filter(assignment__project=obj).prefetch_related('assignees', 'subtasks')
        return AdminTaskSerializer(tasks, many=True).data


# Сериализатор команды для отчета администратора
class AdminTeamDetailsSerializer(serializers.ModelSerializer):
    team_leader = UserShortSerializer(many=True, read_only=True)
    members = UserShortSerializer(many=True, read_only=True)
    created_by = UserShortSerializer(read_only=True)
    projects = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = ['id', 'team_name', 'team_leader', 'members', 'created_by', 'projects', 'created_at', 'updated_at']

    def get_projects(self, obj):
        return [
            {
                'project_id': assignment.project.id,
                'title': assignment.project.title,
                'status': assignment.project.status,
                'deadline': serializers.DateTimeField().to_representation(assignment.deadline),
                'tasks_count': assignment.tasks.count(),
            }
            for assignment in obj.team_assignments.select_related('project')
        ]
