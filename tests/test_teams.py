"""
Tests for team building, editing, deletion and team views.
"""
import pytest
from django.urls import reverse

from projects.models import ProjectAssignment, ProjectStatus
from tasks.models import Subtask, Task
from teams.models import Team
from users.models import UserType


@pytest.mark.django_db
class TestCreateTeam:
    """Team creation rules."""

    def test_leader_is_removed_from_members(self, client_for, manager, leader, members):
        response = client_for(manager).post(reverse('create-team'), {
            'team_name': '  Beta  ',
            'team_leader': leader.id,
            'members': [leader.id, members[0].id, members[1].id, members[1].id],
        }, format='json')

        assert response.status_code == 201
        team = Team.objects.get(id=response.data['team']['id'])
        assert team.team_name == 'Beta'
        assert list(team.team_leader.values_list('id', flat=True)) == [leader.id]
        assert set(team.members.values_list('id', flat=True)) == {members[0].id, members[1].id}

    @pytest.mark.parametrize('count', [1, 6])
    def test_member_count_bounds(self, client_for, manager, leader, make_user, count):
        member_ids = [make_user().id for _ in range(count)]

        response = client_for(manager).post(reverse('create-team'), {
            'team_name': 'Gamma',
            'team_leader': leader.id,
            'members': member_ids,
        }, format='json')

        assert response.status_code == 400
        assert 'members' in response.data['errors']

    def test_team_name_required(self, client_for, manager, leader, members):
        response = client_for(manager).post(reverse('create-team'), {
            'team_name': '   ',
            'team_leader': leader.id,
            'members': [members[0].id, members[1].id],
        }, format='json')

        assert response.status_code == 400
        assert 'team_name' in response.data['errors']

    def test_only_project_managers_create_teams(self, client_for, leader, members):
        response = client_for(leader).post(reverse('create-team'), {
            'team_name': 'Delta',
            'team_leader': leader.id,
            'members': [members[0].id, members[1].id],
        }, format='json')

        assert response.status_code == 403

    def test_create_with_project_assignment(self, client_for, manager, leader, members, project, future, mailoutbox):
        response = client_for(manager).post(reverse('create-team'), {
            'team_name': 'Epsilon',
            'team_leader': leader.id,
            'members': [members[0].id, members[1].id],
            'project_id': project.id,
            'deadline': future.isoformat(),
        }, format='json')

        assert response.status_code == 201
        assignment = ProjectAssignment.objects.get(project=project)
        assert assignment.team.team_name == 'Epsilon'
        assert assignment.assigned_by == manager
        assert len(mailoutbox) > 0

    def test_assignment_requires_future_deadline(self, client_for, manager, leader, members, project):
        response = client_for(manager).post(reverse('create-team'), {
            'team_name': 'Zeta',
            'team_leader': leader.id,
            'members': [members[0].id, members[1].id],
            'project_id': project.id,
            'deadline': '2001-01-01T00:00:00Z',
        }, format='json')

        assert response.status_code == 400
        assert 'deadline' in response.data['errors']
        assert not Team.objects.filter(team_name='Zeta').exists()


@pytest.mark.django_db
class TestEditTeam:
    """Only the creator edits a team."""

    def test_edit(self, client_for, manager, team, leader, members):
        response = client_for(manager).put(reverse('edit-team', kwargs={'team_id': team.id}), {
            'team_name': 'Alpha Prime',
            'team_leader': members[2].id,
            'members': [leader.id, members[0].id],
        }, format='json')

        assert response.status_code == 200
        team.refresh_from_db()
        assert team.team_name == 'Alpha Prime'
        assert team.is_leader(members[2])
        assert team.is_member(leader)

    def test_edit_by_other_manager_is_forbidden(self, client_for, other_manager, team, leader, members):
        response = client_for(other_manager).put(reverse('edit-team', kwargs={'team_id': team.id}), {
            'team_name': 'Hijacked',
            'team_leader': leader.id,
            'members': [members[0].id, members[1].id],
        }, format='json')

        assert response.status_code == 403
        team.refresh_from_db()
        assert team.team_name == 'Alpha'


@pytest.mark.django_db
class TestDeleteTeams:
    """Batch team deletion."""

    def test_delete_cascades_and_resets_project(self, client_for, manager, team, project, subtask):
        project.status = ProjectStatus.IN_PROGRESS
        project.save()

        response = client_for(manager).post(reverse('delete-teams'), {'ids': [team.id]}, format='json')

        assert response.status_code == 200
        assert response.data['deleted_count'] == 1
        assert response.data['deleted_assignments'] == 1
        assert response.data['deleted_tasks'] == 1
        assert response.data['deleted_subtasks'] == 1
        assert not Task.objects.exists()
        assert not Subtask.objects.exists()

        project.refresh_from_db()
        assert project.status == ProjectStatus.PENDING

    def test_delete_requires_ownership_of_every_team(self, client_for, manager, other_manager, team):
        foreign = Team.objects.create(team_name='Foreign', created_by=other_manager)

        response = client_for(manager).post(reverse('delete-teams'), {'ids': [team.id, foreign.id]}, format='json')

        assert response.status_code == 403
        assert Team.objects.count() == 2

    def test_empty_ids_rejected(self, client_for, manager):
        response = client_for(manager).post(reverse('delete-teams'), {'ids': []}, format='json')

        assert response.status_code == 400


@pytest.mark.django_db
class TestTeamViews:
    """Team listings for managers, leaders and members."""

    def test_manager_teams_search(self, client_for, manager, team):
        Team.objects.create(team_name='Omega', created_by=manager)

        response = client_for(manager).get(reverse('get-project-manager-teams'), {'search': 'alp'})

        assert response.status_code == 200
        assert [item['team_name'] for item in response.data['teams']] == ['Alpha']

    def test_team_members_with_roles(self, client_for, team, leader, members):
        response = client_for(members[0]).get(reverse('get-team-members', kwargs={'team_id': team.id}))

        assert response.status_code == 200
        roles = {item['id']: item['role'] for item in response.data['members']}
        assert roles[leader.id] == 'TeamLeader'
        assert roles[members[0].id] == 'TeamMember'
        assert response.data['count'] == 4

    def test_team_members_forbidden_for_outsiders(self, client_for, team, make_user):
        response = client_for(make_user()).get(reverse('get-team-members', kwargs={'team_id': team.id}))

        assert response.status_code == 403

    def test_unknown_team_is_not_found(self, client_for, leader):
        response = client_for(leader).get(reverse('get-team-members', kwargs={'team_id': 999}))

        assert response.status_code == 404
        assert response.data['success'] is False

    def test_led_and_member_teams(self, client_for, team, leader, members):
        led = client_for(leader).get(reverse('get-led-teams'))
        joined = client_for(members[1]).get(reverse('get-member-teams'))

        assert [item['id'] for item in led.data['teams']] == [team.id]
        assert [item['id'] for item in joined.data['teams']] == [team.id]
        assert client_for(leader).get(reverse('get-member-teams')).data['teams'] == []

    @pytest.mark.parametrize('url_name', ['get-led-teams', 'get-member-teams', 'tasks-for-assignment'])
    def test_own_lists_require_authentication(self, client_for, url_name):
        response = client_for().get(reverse(url_name))

        assert response.status_code == 401
        assert response.data['success'] is False

    def test_team_data_forbidden_for_outsiders(self, client_for, team, make_user):
        response = client_for(make_user()).get(reverse('get-team-data', kwargs={'team_id': team.id}))

        assert response.status_code == 403

    def test_team_projects(self, client_for, team, assignment, members):
        response = client_for(members[2]).get(reverse('get-team-projects', kwargs={'team_id': team.id}))

        assert response.status_code == 200
        assert response.data['projects'][0]['title'] == 'Portal'

    def test_available_users_excludes_managers_and_admins(self, client_for, manager, admin, members, leader):
        response = client_for(manager).get(reverse('get-available-users'))

        emails = {item['email'] for item in response.data['users']}
        assert {member.email for member in members} <= emails
        assert leader.email in emails
        assert manager.email not in emails
        assert admin.email not in emails
        assert all(item['user_type'] in (UserType.USER, UserType.TEAM_LEADER) for item in response.data['users'])
