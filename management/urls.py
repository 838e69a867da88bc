# management/urls.py

from django.urls import path
from .views import *

urlpatterns = [
    path('admin/get-all-users/', GetAllUsersView.as_view(), name='admin-get-all-users'),
    path('admin/get-all-project-managers/', GetAllProjectManagersView.as_view(), name='admin-get-all-project-managers'),
    path('admin/get-all-team-participants/', GetAllTeamParticipantsView.as_view(), name='admin-get-all-team-participants'),
    path('admin/user/<int:user_id>/details/', AdminUserDetailsView.as_view(), name='admin-user-details'),
    path('admin/user/<int:user_id>/edit/', AdminEditUserView.as_view(), name='admin-edit-user'),
    path('admin/update-users/', UpdateUsersView.as_view(), name='admin-update-users'),
    path('admin/delete-users/', DeleteUsersView.as_view(), name='admin-delete-users'),
    path('admin/delete-project-managers/', DeleteProjectManagersView.as_view(), name='admin-delete-project-managers'),
    path('admin/project/<int:project_id>/tasks-details/', AdminProjectTasksDetailsView.as_view(), name='admin-project-tasks-details'),
    path('admin/team/<int:team_id>/details/', AdminTeamDetailsView.as_view(), name='admin-team-details'),
    path('change-account-activation/', ChangeActivationView.as_view(), name='change-account-activation'),
    path('get-action-types/', GetActionTypesView.as_view(), name='get-action-types'),
    path('get-actions/user/<int:user_id>/type/<int:type_id>/', GetUserActionsView.as_view(), name='get-user-actions'),
]
