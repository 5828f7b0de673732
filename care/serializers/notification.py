from rest_framework import serializers

from care.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    notificationId = serializers.IntegerField(source='id', read_only=True)
    userId = serializers.IntegerField(source='recipient_id', read_only=True)
    relatedId = serializers.IntegerField(source='related_id', read_only=True, allow_null=True)
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Notification
        fields = ['notificationId', 'userId', 'title', 'message', 'type', 'relatedId', 'isRead', 'createdAt']
        read_only_fields = fields
