# teams/urls.py

from django.urls import path
from .views import *

urlpatterns = [
    path('teams/create/', CreateTeamView.as_view(), name='create-team'),
    path('teams/delete/', DeleteTeamsView.as_view(), name='delete-teams'),
    path('teams/get-my-teams/', GetProjectManagerTeamsView.as_view(), name='get-project-manager-teams'),
    path('teams/available-users/', GetAvailableUsersView.as_view(), name='get-available-users'),
    path('teams/led/', GetLedTeamsView.as_view(), name='get-led-teams'),
    path('teams/member/', GetMemberTeamsView.as_view(), name='get-member-teams'),
    path('team/<int:team_id>/', GetTeamDataView.as_view(), name='get-team-data'),
    path('team/<int:team_id>/edit/', EditTeamView.as_view(), name='edit-team'),
    path('team/<int:team_id>/projects/', GetTeamProjectsView.as_view(), name='get-team-projects'),
    path('team/<int:team_id>/members/', GetTeamMembersView.as_view(), name='get-team-members'),
]
