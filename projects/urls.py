# projects/urls.py

from django.urls import path
from .views import *

urlpatterns = [
    path('create-project/', CreateProjectView.as_view(), name='create-project'),
    path('get-my-projects-list/', GetProjectManagerProjectsView.as_view(), name='get-my-projects-list'),
    path('get-unassigned-projects/', GetUnassignedProjectsView.as_view(), name='get-unassigned-projects'),
    path('unassign-projects/', UnassignProjectsView.as_view(), name='unassign-projects'),
    path('delete-projects/', DeleteProjectsView.as_view(), name='delete-projects'),
    path('project/<int:project_id>/for-update/', GetProjectForUpdateView.as_view(), name='get-project-for-update'),
    path('project/<int:project_id>/change-info/', UpdateProjectView.as_view(), name='change-project-info'),
    path('project/<int:project_id>/assign/', AssignProjectView.as_view(), name='assign-project'),
]
