# users/models.py

from django.db import models
from django.contrib.auth.hashers import make_password, check_password


class UserType(models.TextChoices):
    USER = 'User', 'User'
    PROJECT_MANAGER = 'ProjectManager', 'Project Manager'
    TEAM_LEADER = 'TML', 'Team Leader'
    ADMIN = 'Admin', 'Admin'


DEFAULT_PROFILE_PIC = '/default-profile.png'


class User(models.Model):
    email = models.EmailField(max_length=150, unique=True)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    contact = models.CharField(max_length=20, blank=True)
    profile_pic = models.CharField(max_length=255, default=DEFAULT_PROFILE_PIC)
    password = models.CharField(max_length=128)
    user_type = models.CharField(max_length=20, choices=UserType.choices, default=UserType.USER)
    date_joined = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(null=True, blank=True)
    notifications_status = models.BooleanField(default=True)
    is_verified = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    REQUIRED_FIELDS = ['first_name', 'last_name']
    USERNAME_FIELD = 'email'

    @property
    def is_authenticated(self):
        return self.is_active

    @property
    def is_anonymous(self):
        return not self.is_authenticated

    @property
    def is_admin(self):
        return self.user_type == UserType.ADMIN

    @property
    def is_project_manager(self):
        return self.user_type == UserType.PROJECT_MANAGER

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def get_email_field_name(self):
        return 'email'

    def __str__(self):
        return self.email

    def set_password(self, unencrypted_password):
        self.password = make_password(unencrypted_password)

    def check_password(self, unencrypted_password):
        return check_password(unencrypted_password, self.password)


class Action_type(models.Model):
    name = models.CharField(max_length=150)

    def __str__(self):
        return self.name


class User_action(models.Model):
    type = models.ForeignKey(
        Action_type,
        related_name='type_actions',
        on_delete=models.PROTECT
    )
    user = models.ForeignKey(
        User,
        related_name='user_actions',
        on_delete=models.CASCADE
    )
    date_of_issue = models.DateTimeField(auto_now_add=True)
    description = models.TextField()
    status = models.CharField(max_length=30)

    def __str__(self):
        return f"Action '{self.type.name}' with status '{self.status}' by {self.user.email}."
