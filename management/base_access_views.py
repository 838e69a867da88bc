# management/base_access_views.py

from rest_framework.permissions import IsAuthenticated
from rest_framework.generics import GenericAPIView
from .permissions import *

class BaseAdminAccessView(GenericAPIView):
    permission_classes = [IsAdmin]

class BaseProjectManagerAccessView(GenericAPIView):
    permission_classes = [IsProjectManager]

class BaseAssignerAccessView(GenericAPIView):
    permission_classes = [IsAssigner]

class BaseTeamLeaderAccessView(GenericAPIView):
    permission_classes = [IsTeamLeader]

class BaseTeamMemberAccessView(GenericAPIView):
    permission_classes = [IsTeamMember]

class BaseTeamParticipantAccessView(GenericAPIView):
    permission_classes = [IsTeamParticipant]

class BaseReviewerAccessView(GenericAPIView):
    permission_classes = [CanReview]

class BaseWorkViewerAccessView(GenericAPIView):
    permission_classes = [CanViewWork]

# Доступ ограничивается выборкой или проверкой в самой вью
class BaseAuthenticatedAccessView(GenericAPIView):
    permission_classes = [IsAuthenticated]
