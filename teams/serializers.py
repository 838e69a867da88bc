# teams/serializers.py

from projects.models import Project, ProjectAssignment
from users.serializers import UserShortSerializer
from users.models import User, UserType
from rest_framework import serializers
from django.utils.timezone import now
from django.db import transaction
from users.utils import *
from .models import Team

TEAM_MEMBERS_MIN = 2
TEAM_MEMBERS_MAX = 5
TEAM_BUILDING_TYPES = (UserType.USER, UserType.TEAM_LEADER)


def get_team_builders():
    return User.objects.filter(user_type__in=TEAM_BUILDING_TYPES, is_active=True)


# Сериализатор для создания и изменения команды
class TeamWriteSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(
        max_length=100,
        error_messages={
            'blank': 'Team name is required.',
            'max_length': 'Team name must be at most 100 characters long.'
        }
    )
    team_leader = serializers.IntegerField(write_only=True)
    members = serializers.ListField(child=serializers.IntegerField(), write_only=True)

    class Meta:
        model = Team
        fields = ['id', 'team_name', 'team_leader', 'members']
        read_only_fields = ['id']

    def validate_team_name(self, value):
        value = value.strip()

        if not value:
            raise serializers.ValidationError('Team name is required.')
        return value

    def validate_team_leader(self, value):
        try:
            return get_team_builders().get(id=value)
        except User.DoesNotExist:
            raise serializers.ValidationError('Team leader not found.')

    def validate(self, data):
        leader = data['team_leader']

        # Лидер не может одновременно быть участником команды
        member_ids = []
        for member_id in data['members']:
            if member_id != leader.id and member_id not in member_ids:
                member_ids.append(member_id)

        if not TEAM_MEMBERS_MIN <= len(member_ids) <= TEAM_MEMBERS_MAX:
            raise serializers.ValidationError({
                'members': f'A team must have between {TEAM_MEMBERS_MIN} and {TEAM_MEMBERS_MAX} members besides the leader.'
            })

        members = list(get_team_builders().filter(id__in=member_ids))

        if len(members) != len(member_ids):
            found = {member.id for member in members}
            missing = [member_id for member_id in member_ids if member_id not in found]
            raise serializers.ValidationError({'members': f'Users not found: {missing}.'})

        data['members'] = members
        return data


# Сериализатор для создания команды (с необязательным назначением проекта)
class CreateTeamSerializer(TeamWriteSerializer):
    project_id = serializers.IntegerField(required=False, allow_null=True, write_only=True)
    deadline = serializers.DateTimeField(required=False, allow_null=True, write_only=True)

    class Meta(TeamWriteSerializer.Meta):
        fields = TeamWriteSerializer.Meta.fields + ['project_id', 'deadline']

    def validate(self, data):
        data = super().validate(data)
        user = self.context['request'].user
        project_id = data.get('project_id')

        if project_id is None:
            return data

        try:
            project = Project.objects.get(id=project_id, created_by=user)
        except Project.DoesNotExist:
            raise serializers.ValidationError({'project_id': 'Project not found.'})

        if ProjectAssignment.objects.filter(project=project).exists():
            raise serializers.ValidationError({'project_id': 'Project is already assigned to a team.'})

        deadline = data.get('deadline')

        if deadline is None:
            raise serializers.ValidationError({'deadline': 'Deadline is required when assigning a project.'})

        if deadline <= now():
            raise serializers.ValidationError({'deadline': 'Deadline must be in the future.'})

        data['project'] = project
        return data

    @transaction.atomic
    def create(self, validated_data):
        user = self.context['request'].user
        leader = validated_data['team_leader']
        members = validated_data['members']
        project = validated_data.get('project')

        team = Team.objects.create(team_name=validated_data['team_name'], created_by=user)
        team.team_leader.set([leader])
        team.members.set(members)

        log_user_action(
            user=user,
            action_name="Teams",
            description=f"Project manager created team «{team.team_name}»"
        )

        if project is not None:
            ProjectAssignment.objects.create(
                project=project,
                team=team,
                assigned_by=user,
                deadline=validated_data['deadline']
            )

            log_user_action(
                user=user,
                action_name="Projects",
                description=f"Project manager assigned project «{project.title}» to team «{team.team_name}»"
            )

        send_mail_notification(
            users=[leader] + members,
            header="New team",
            text=f"You have been added to team «{team.team_name}»."
        )

        return team


# Сериализатор для изменения команды
class EditTeamSerializer(TeamWriteSerializer):

    @transaction.atomic
    def update(self, instance, validated_data):
        user = self.context['request'].user
        leader = validated_data['team_leader']
        members = validated_data['members']

        previous = set(instance.team_leader.values_list('id', flat=True)) | set(instance.members.values_list('id', flat=True))

        instance.team_name = validated_data['team_name']
        instance.save()
        instance.team_leader.set([leader])
        instance.members.set(members)

        log_user_action(
            user=user,
            action_name="Teams",
            description=f"Project manager edited team «{instance.team_name}»"
        )

        newcomers = [participant for participant in [leader] + members if participant.id not in previous]
        send_mail_notification(
            users=newcomers,
            header="New team",
            text=f"You have been added to team «{instance.team_name}»."
        )

        return instance


# Сериализатор для получения информации о команде
class GetTeamSerializer(serializers.ModelSerializer):
    team_leader = UserShortSerializer(many=True, read_only=True)
    members = UserShortSerializer(many=True, read_only=True)
    created_by = UserShortSerializer(read_only=True)
    projects_count = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = ['id', 'team_name', 'team_leader', 'members', 'created_by', 'projects_count', 'created_at', 'updated_at']

    def get_projects_count(self, obj):
        return obj.team_assignments.count()


# Сериализатор для получения проектов команды
class TeamProjectSerializer(serializers.ModelSerializer):
    project_id = serializers.IntegerField(source='project.id', read_only=True)
    title = serializers.CharField(source='project.title', read_only=True)
    description = serializers.CharField(source='project.description', read_only=True)
    status = serializers.CharField(source='project.status', read_only=True)
    assigned_by = UserShortSerializer(read_only=True)
    tasks_count = serializers.SerializerMethodField()

    class Meta:
        model = ProjectAssignment
        fields = ['id', 'project_id', 'title', 'description', 'status', 'deadline', 'assigned_by', 'tasks_count', 'created_at']

    def get_tasks_count(self, obj):
        return obj.tasks.count()


# Сериализатор участника команды с его ролью
class TeamParticipantSerializer(UserShortSerializer):
    role = serializers.SerializerMethodField()

    class Meta(UserShortSerializer.Meta):
        fields = UserShortSerializer.Meta.fields + ['role']

    def get_role(self, obj):
        team = self.context['team']
        return "TeamLeader" if team.is_leader(obj) else "TeamMember"
