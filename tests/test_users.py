"""
Tests for accounts: registration, verification, login, profile and passwords.
"""
import pytest
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from users.models import User, UserType, User_action
from users.tokens import email_verification_token
from users.utils import password_strength

from .conftest import PASSWORD


@pytest.mark.django_db
class TestRegistration:
    """Account creation and email verification."""

    def test_register_creates_unverified_user_and_sends_mail(self, client_for, mailoutbox):
        response = client_for().post(reverse('user-registration'), {
            'first_name': 'Nina',
            'last_name': 'New',
            'email': 'Nina@Example.com',
            'password': 'abcdef',
            'contact': '555-0100',
        }, format='json')

        assert response.status_code == 201
        assert response.data['success'] is True

        user = User.objects.get(id=response.data['user_id'])
        assert user.email == 'nina@example.com'
        assert user.user_type == UserType.USER
        assert user.is_verified is False
        assert user.check_password('abcdef')

        assert len(mailoutbox) == 1
        assert 'http://frontend.test/verify-email/' in mailoutbox[0].body

    def test_register_rejects_short_password(self, client_for):
        response = client_for().post(reverse('user-registration'), {
            'first_name': 'Nina',
            'last_name': 'New',
            'email': 'nina@example.com',
            'password': 'abc',
        }, format='json')

        assert response.status_code == 400
        assert response.data['success'] is False
        assert 'at least 6 characters' in response.data['message']

    def test_register_rejects_duplicate_email_case_insensitively(self, client_for, make_user):
        make_user(email='taken@example.com')

        response = client_for().post(reverse('user-registration'), {
            'first_name': 'Nina',
            'last_name': 'New',
            'email': 'TAKEN@example.com',
            'password': 'abcdef',
        }, format='json')

        assert response.status_code == 400
        assert 'Email is already registered' in response.data['message']

    def test_admin_registration_requires_key(self, client_for):
        payload = {
            'first_name': 'Root',
            'last_name': 'Admin',
            'email': 'root@example.com',
            'password': 'abcdef',
            'registration_key': 'wrong',
        }

        response = client_for().post(reverse('admin-registration'), payload, format='json')
        assert response.status_code == 400

        payload['registration_key'] = 'admin-key'
        response = client_for().post(reverse('admin-registration'), payload, format='json')
        assert response.status_code == 201

        admin = User.objects.get(email='root@example.com')
        assert admin.user_type == UserType.ADMIN
        assert admin.is_verified is True

    def test_verify_email(self, client_for, make_user):
        user = make_user(is_verified=False)
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = email_verification_token.make_token(user)

        response = client_for().post(reverse('verify-email'), {'uid': uid, 'token': token}, format='json')

        assert response.status_code == 200
        user.refresh_from_db()
        assert user.is_verified is True

    def test_verify_email_rejects_bad_token(self, client_for, make_user):
        user = make_user(is_verified=False)
        uid = urlsafe_base64_encode(force_bytes(user.pk))

        response = client_for().post(reverse('verify-email'), {'uid': uid, 'token': 'bad-token'}, format='json')

        assert response.status_code == 400
        user.refresh_from_db()
        assert user.is_verified is False


@pytest.mark.django_db
class TestLogin:
    """Login responses and rejections."""

    def test_login_returns_tokens_and_roles(self, client_for, team, leader):
        response = client_for().post(reverse('user-login'), {
            'email': 'LEADER@example.com',
            'password': PASSWORD,
        }, format='json')

        assert response.status_code == 200
        assert response.data['success'] is True
        assert response.data['access_token']
        assert response.data['refresh_token']
        assert response.data['user']['user_roles'] == ['TeamLeader']

        leader.refresh_from_db()
        assert leader.last_login is not None

    def test_login_rejects_wrong_password(self, client_for, make_user):
        make_user(email='someone@example.com')

        response = client_for().post(reverse('user-login'), {
            'email': 'someone@example.com',
            'password': 'not-the-password',
        }, format='json')

        assert response.status_code == 400
        assert response.data['success'] is False
        assert response.data['message'] == 'Invalid email or password.'

    def test_login_rejects_blocked_account(self, client_for, make_user):
        make_user(email='blocked@example.com', is_active=False)

        response = client_for().post(reverse('user-login'), {
            'email': 'blocked@example.com',
            'password': PASSWORD,
        }, format='json')

        assert response.status_code == 400
        assert 'blocked' in response.data['errors']

    def test_login_unverified_resends_verification(self, client_for, make_user, mailoutbox):
        make_user(email='fresh@example.com', is_verified=False)

        response = client_for().post(reverse('user-login'), {
            'email': 'fresh@example.com',
            'password': PASSWORD,
        }, format='json')

        assert response.status_code == 400
        assert 'not_verified' in response.data['errors']
        assert len(mailoutbox) == 1

    def test_login_writes_audit_record(self, client_for, make_user):
        user = make_user(email='audit@example.com')

        client_for().post(reverse('user-login'), {'email': 'audit@example.com', 'password': PASSWORD}, format='json')

        assert User_action.objects.filter(user=user, type__name='Accounts', description='User logged in').exists()


@pytest.mark.django_db
class TestProfile:
    """Profile read/update and the unauthenticated envelope."""

    def test_profile_requires_authentication(self, client_for):
        response = client_for().get(reverse('get-user-profile-info'))

        assert response.status_code == 401
        assert response.data['success'] is False
        assert response.data['message']

    def test_get_profile(self, client_for, make_user):
        user = make_user(first_name='Greta')

        response = client_for(user).get(reverse('get-user-profile-info'))

        assert response.status_code == 200
        assert response.data['user']['first_name'] == 'Greta'
        assert response.data['user']['user_roles'] == []

    def test_update_profile_ignores_read_only_type(self, client_for, make_user):
        user = make_user()

        response = client_for(user).patch(reverse('change-user-profile-info'), {
            'first_name': 'Renamed',
            'user_type': UserType.ADMIN,
        }, format='json')

        assert response.status_code == 200
        user.refresh_from_db()
        assert user.first_name == 'Renamed'
        assert user.user_type == UserType.USER


@pytest.mark.django_db
class TestChangePassword:
    """Password change validation and strength label."""

    url = 'change-password'

    @pytest.mark.parametrize('payload, error_key', [
        ({'current_password': PASSWORD, 'new_password': 'abc', 'confirm_password': 'abc'}, 'new_password'),
        ({'current_password': PASSWORD, 'new_password': PASSWORD, 'confirm_password': PASSWORD}, 'same_password'),
        ({'current_password': PASSWORD, 'new_password': 'abcdefg', 'confirm_password': 'abcdefh'}, 'confirm_password'),
        ({'current_password': 'wrong-one', 'new_password': 'abcdefg', 'confirm_password': 'abcdefg'}, 'wrong_password'),
    ])
    def test_invalid_change_is_rejected(self, client_for, make_user, payload, error_key):
        user = make_user()

        response = client_for(user).put(reverse(self.url), payload, format='json')

        assert response.status_code == 400
        assert error_key in response.data['errors']
        user.refresh_from_db()
        assert user.check_password(PASSWORD)

    def test_change_password_reports_strength(self, client_for, make_user):
        user = make_user()

        response = client_for(user).put(reverse(self.url), {
            'current_password': PASSWORD,
            'new_password': 'Str0ng!Pass',
            'confirm_password': 'Str0ng!Pass',
        }, format='json')

        assert response.status_code == 200
        assert response.data['password_strength'] == 'Strong'
        user.refresh_from_db()
        assert user.check_password('Str0ng!Pass')


@pytest.mark.django_db
class TestPasswordReset:
    """Password reset by mailed link."""

    def test_reset_flow(self, client_for, make_user, mailoutbox):
        user = make_user(email='forgot@example.com')

        response = client_for().post(reverse('password-reset'), {'email': 'forgot@example.com'}, format='json')
        assert response.status_code == 200
        assert len(mailoutbox) == 1

        link = mailoutbox[0].body.split('password-reset-confirm/')[1]
        uid, token = link.strip('/').split('/')[:2]

        response = client_for().post(
            reverse('password-reset-confirm', kwargs={'uidb64': uid, 'token': token}),
            {'new_password': 'brandnew'},
            format='json'
        )

        assert response.status_code == 200
        user.refresh_from_db()
        assert user.check_password('brandnew')

    def test_reset_unknown_email(self, client_for, db):
        response = client_for().post(reverse('password-reset'), {'email': 'nobody@example.com'}, format='json')

        assert response.status_code == 400
        assert response.data['success'] is False


class TestPasswordStrength:
    """Character-class heuristic."""

    @pytest.mark.parametrize('password, expected', [
        ('', (0, 'None')),
        ('abc', (1, 'Very Weak')),
        ('abcdefgh', (2, 'Weak')),
        ('Abcdefgh', (3, 'Fair')),
        ('Abcdefg1', (4, 'Good')),
        ('Abcdef1!', (5, 'Strong')),
        ('!!', (1, 'Very Weak')),
    ])
    def test_levels(self, password, expected):
        assert password_strength(password) == expected
