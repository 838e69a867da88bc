# teams/models.py

from django.db import models
from users.models import User


class Team(models.Model):
    team_name = models.CharField(max_length=100)
    team_leader = models.ManyToManyField(
        User,
        related_name='led_teams'
    )
    members = models.ManyToManyField(
        User,
        related_name='member_teams'
    )
    created_by = models.ForeignKey(
        User,
        related_name='created_teams',
        on_delete=models.CASCADE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.team_name

    def is_leader(self, user):
        return self.team_leader.filter(id=user.id).exists()

    def is_member(self, user):
        return self.members.filter(id=user.id).exists()

    def is_participant(self, user):
        return self.is_leader(user) or self.is_member(user)
