"""Views for the per-user settings and the persisted client state."""

from rest_framework import viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import UserSettings
from ..serializers import UserSettingsSerializer, persisted_state


class UserSettingsViewSet(viewsets.GenericViewSet):
    """Viewset for viewing and editing the requesting user's settings."""

    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    serializer_class = UserSettingsSerializer

    def list(self, request, *args, **kwargs):
        instance = UserSettings.load(request.user)
        serializer = self.get_serializer(instance)
        return Response(serializer.data)

    def create(self, request, *args, **kwargs):
        """Update the settings using POST."""
        instance = UserSettings.load(request.user)
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def app_state(request):
    """Snapshot of the user and settings a client keeps across reloads."""

    settings = UserSettings.load(request.user)
    return Response(persisted_state(request.user, settings, context={'request': request}))
