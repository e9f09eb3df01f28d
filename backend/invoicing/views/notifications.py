"""Notification inbox views."""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..serializers import NotificationSerializer


class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = self.request.user.invoicing_notifications.all()
        if self.request.query_params.get('unread') in ('1', 'true', 'yes'):
            queryset = queryset.filter(is_read=False)
        return queryset

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        count = request.user.invoicing_notifications.filter(is_read=False).count()
        return Response({'unread_count': count})

    @action(detail=True, methods=['post'], url_path='read')
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=['is_read'])
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def mark_all_read(self, request):
        updated = request.user.invoicing_notifications.filter(is_read=False).update(is_read=True)
        return Response({'updated': updated})

    @action(detail=False, methods=['delete', 'post'], url_path='clear')
    def clear(self, request):
        deleted, _ = request.user.invoicing_notifications.all().delete()
        return Response({'deleted': deleted}, status=status.HTTP_200_OK)
