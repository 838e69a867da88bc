"""
Fixtures shared by the API test suite.
"""
import itertools
from datetime import timedelta

import pytest
from django.utils.timezone import now
from rest_framework.test import APIClient

from projects.models import Project, ProjectAssignment
from tasks.models import Subtask, Task
from teams.models import Team
from users.models import User, UserType

PASSWORD = 'secret123'


@pytest.fixture(autouse=True)
def test_settings(settings):
    """Fast hashing, in-memory mail and a known admin key."""
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    settings.ADMIN_REGISTRATION_KEY = 'admin-key'
    settings.FRONTEND_URL = 'http://frontend.test'
    return settings


@pytest.fixture
def future():
    return now() + timedelta(days=7)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def factory(user_type=UserType.USER, password=PASSWORD, **kwargs):
        number = next(counter)
        fields = {
            'email': f'user{number}@example.com',
            'first_name': f'First{number}',
            'last_name': f'Last{number}',
            'is_verified': True,
        }
        fields.update(kwargs)
        user = User(user_type=user_type, **fields)
        user.set_password(password)
        user.save()
        return user

    return factory


@pytest.fixture
def client_for():
    """Return an APIClient authenticated as the given user (anonymous for None)."""
    def factory(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client

    return factory


@pytest.fixture
def admin(make_user):
    return make_user(UserType.ADMIN, email='admin@example.com', first_name='Ada', last_name='Admin')


@pytest.fixture
def manager(make_user):
    return make_user(UserType.PROJECT_MANAGER, email='pm@example.com', first_name='Paula', last_name='Manager')


@pytest.fixture
def other_manager(make_user):
    return make_user(UserType.PROJECT_MANAGER, email='pm2@example.com', first_name='Peter', last_name='Other')


@pytest.fixture
def leader(make_user):
    return make_user(UserType.TEAM_LEADER, email='leader@example.com', first_name='Liam', last_name='Leader')


@pytest.fixture
def members(make_user):
    return [
        make_user(email='alice@example.com', first_name='Alice', last_name='Zed'),
        make_user(email='bob@example.com', first_name='Bob', last_name='Young'),
        make_user(email='carol@example.com', first_name='Carol', last_name='Xu'),
    ]


@pytest.fixture
def team(manager, leader, members):
    team = Team.objects.create(team_name='Alpha', created_by=manager)
    team.team_leader.set([leader])
    team.members.set(members)
    return team


@pytest.fixture
def project(manager):
    return Project.objects.create(title='Portal', description='Build the portal', created_by=manager)


@pytest.fixture
def assignment(project, team, manager, future):
    return ProjectAssignment.objects.create(project=project, team=team, assigned_by=manager, deadline=future)


@pytest.fixture
def task(assignment, manager, members, future):
    task = Task.objects.create(
        assignment=assignment,
        title='Login page',
        description='Implement the login page',
        deadline=future,
        created_by=manager
    )
    task.assignees.set([members[0]])
    return task


@pytest.fixture
def subtask(task, members, future):
    subtask = Subtask.objects.create(
        parent_task=task,
        title='Form layout',
        description='Lay out the login form fields',
        deadline=future
    )
    subtask.assignees.set([members[0]])
    return subtask
