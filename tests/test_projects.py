"""
Tests for project creation, listing, assignment and batch operations.
"""
import pytest
from django.urls import reverse

from projects.models import Project, ProjectAssignment, ProjectStatus
from tasks.models import Task


@pytest.mark.django_db
class TestCreateProject:
    """Project creation with an optional team."""

    def test_create_without_team(self, client_for, manager):
        response = client_for(manager).post(reverse('create-project'), {
            'title': 'Library',
            'description': 'Catalogue system',
        }, format='json')

        assert response.status_code == 201
        project = Project.objects.get(id=response.data['project']['id'])
        assert project.created_by == manager
        assert project.status == ProjectStatus.PENDING
        assert response.data['project']['team_id'] is None

    def test_title_and_description_required(self, client_for, manager):
        response = client_for(manager).post(reverse('create-project'), {'title': ' ', 'description': ''}, format='json')

        assert response.status_code == 400
        assert {'title', 'description'} <= set(response.data['errors'])

    def test_team_requires_future_deadline(self, client_for, manager, team):
        response = client_for(manager).post(reverse('create-project'), {
            'title': 'Library',
            'description': 'Catalogue system',
            'team_id': team.id,
        }, format='json')

        assert response.status_code == 400
        assert 'deadline' in response.data['errors']
        assert not Project.objects.filter(title='Library').exists()

    def test_create_with_team(self, client_for, manager, team, future):
        response = client_for(manager).post(reverse('create-project'), {
            'title': 'Library',
            'description': 'Catalogue system',
            'team_id': team.id,
            'deadline': future.isoformat(),
        }, format='json')

        assert response.status_code == 201
        assert response.data['project']['team_name'] == 'Alpha'
        assert ProjectAssignment.objects.filter(project__title='Library', team=team).exists()

    def test_foreign_team_rejected(self, client_for, other_manager, team, future):
        response = client_for(other_manager).post(reverse('create-project'), {
            'title': 'Library',
            'description': 'Catalogue system',
            'team_id': team.id,
            'deadline': future.isoformat(),
        }, format='json')

        assert response.status_code == 400
        assert 'team_id' in response.data['errors']


@pytest.mark.django_db
class TestProjectLists:
    """Search and ordering over the manager's projects."""

    @pytest.fixture
    def projects(self, manager, other_manager):
        Project.objects.create(title='Beta', description='second', created_by=manager)
        Project.objects.create(title='Alpha', description='first', created_by=manager)
        Project.objects.create(title='Gamma', description='third', created_by=manager)
        Project.objects.create(title='Alien', description='not mine', created_by=other_manager)

    def titles(self, response):
        return [item['title'] for item in response.data['projects']]

    def test_only_own_projects_in_natural_order(self, client_for, manager, projects):
        response = client_for(manager).get(reverse('get-my-projects-list'))

        assert self.titles(response) == ['Beta', 'Alpha', 'Gamma']
        assert response.data['count'] == 3

    def test_ordering_ascending_and_descending(self, client_for, manager, projects):
        client = client_for(manager)

        ascending = self.titles(client.get(reverse('get-my-projects-list'), {'ordering': 'title'}))
        descending = self.titles(client.get(reverse('get-my-projects-list'), {'ordering': '-title'}))

        assert ascending == ['Alpha', 'Beta', 'Gamma']
        assert descending == ['Gamma', 'Beta', 'Alpha']

    def test_search_is_case_insensitive(self, client_for, manager, projects):
        response = client_for(manager).get(reverse('get-my-projects-list'), {'search': 'ALPHA'})

        assert self.titles(response) == ['Alpha']

    def test_unassigned_projects(self, client_for, manager, assignment, projects):
        response = client_for(manager).get(reverse('get-unassigned-projects'))

        assert 'Portal' not in self.titles(response)
        assert len(self.titles(response)) == 3


@pytest.mark.django_db
class TestUpdateProject:
    """Creator-only project changes."""

    def test_update_title_and_deadline(self, client_for, manager, project, assignment, future):
        later = future.replace(year=future.year + 1)

        response = client_for(manager).put(reverse('change-project-info', kwargs={'project_id': project.id}), {
            'title': 'Portal v2',
            'deadline': later.isoformat(),
        }, format='json')

        assert response.status_code == 200
        project.refresh_from_db()
        assignment.refresh_from_db()
        assert project.title == 'Portal v2'
        assert assignment.deadline == later

    def test_deadline_needs_assignment(self, client_for, manager, project, future):
        response = client_for(manager).put(reverse('change-project-info', kwargs={'project_id': project.id}), {
            'deadline': future.isoformat(),
        }, format='json')

        assert response.status_code == 400

    def test_other_manager_cannot_update(self, client_for, other_manager, project):
        response = client_for(other_manager).put(reverse('change-project-info', kwargs={'project_id': project.id}), {
            'title': 'Taken over',
        }, format='json')

        assert response.status_code == 403

    def test_project_for_update(self, client_for, manager, project, assignment):
        response = client_for(manager).get(reverse('get-project-for-update', kwargs={'project_id': project.id}))

        assert response.status_code == 200
        assert response.data['project']['team_id'] == assignment.team_id


@pytest.mark.django_db
class TestAssignment:
    """Assigning and unassigning projects."""

    def test_assign(self, client_for, manager, project, team, future):
        response = client_for(manager).post(reverse('assign-project', kwargs={'project_id': project.id}), {
            'team_id': team.id,
            'deadline': future.isoformat(),
        }, format='json')

        assert response.status_code == 201
        assert response.data['assignment']['team_name'] == 'Alpha'

    def test_assign_twice_rejected(self, client_for, manager, project, team, assignment, future):
        response = client_for(manager).post(reverse('assign-project', kwargs={'project_id': project.id}), {
            'team_id': team.id,
            'deadline': future.isoformat(),
        }, format='json')

        assert response.status_code == 400

    def test_unassign_cascades_and_resets_status(self, client_for, manager, project, task, subtask):
        project.status = ProjectStatus.IN_PROGRESS
        project.save()

        response = client_for(manager).post(reverse('unassign-projects'), {'ids': [project.id]}, format='json')

        assert response.status_code == 200
        assert response.data['successful_count'] == 1
        assert response.data['deleted_tasks'] == 1
        assert response.data['deleted_subtasks'] == 1

        project.refresh_from_db()
        assert project.status == ProjectStatus.PENDING
        assert not ProjectAssignment.objects.filter(project=project).exists()

    def test_unassign_nothing_found(self, client_for, manager, project):
        response = client_for(manager).post(reverse('unassign-projects'), {'ids': [project.id]}, format='json')

        assert response.status_code == 404


@pytest.mark.django_db
class TestDeleteProjects:
    """Batch project deletion."""

    def test_delete_removes_exactly_selected(self, client_for, manager, project, task):
        keep = Project.objects.create(title='Keep', description='stay', created_by=manager)

        response = client_for(manager).post(reverse('delete-projects'), {'ids': [project.id]}, format='json')

        assert response.status_code == 200
        assert response.data['deleted_count'] == 1
        assert response.data['deleted_tasks'] == 1
        assert list(Project.objects.values_list('id', flat=True)) == [keep.id]
        assert not Task.objects.exists()

    def test_partial_delete_answers_multi_status(self, client_for, manager, other_manager, project):
        foreign = Project.objects.create(title='Foreign', description='x', created_by=other_manager)

        response = client_for(manager).post(reverse('delete-projects'), {'ids': [project.id, foreign.id]}, format='json')

        assert response.status_code == 207
        assert response.data['success'] is False
        assert response.data['deleted_count'] == 1
        assert response.data['failed_count'] == 1
        assert Project.objects.filter(id=foreign.id).exists()

    def test_delete_none_owned_is_forbidden(self, client_for, other_manager, project):
        response = client_for(other_manager).post(reverse('delete-projects'), {'ids': [project.id]}, format='json')

        assert response.status_code == 403
        assert Project.objects.filter(id=project.id).exists()
