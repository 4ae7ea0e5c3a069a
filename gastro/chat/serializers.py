from django.conf import settings
from rest_framework import serializers

from gastro.core.serializers import PublicUserSerializer
from .models import ChatConversation, ChatMessage


class ChatMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.display_name', read_only=True)
    sender_role = serializers.CharField(source='sender.role', read_only=True)

    class Meta:
        model = ChatMessage
        fields = ['id', 'conversation', 'sender', 'sender_name', 'sender_role', 'receiver', 'message',
                  'is_read', 'attachment_url', 'attachment_type', 'attachment_data', 'attachment_size',
                  'created_at']
        read_only_fields = ['sender', 'is_read', 'created_at']

    def validate_message(self, value):
        if not value.strip():
            raise serializers.ValidationError('Message cannot be empty')
        return value

    def validate_attachment_size(self, value):
        if value is not None and value > settings.MAX_IMAGE_UPLOAD_BYTES:
            raise serializers.ValidationError('Attachment is too large')
        return value


class ChatConversationSerializer(serializers.ModelSerializer):
    participants = PublicUserSerializer(many=True, read_only=True)
    participant_ids = serializers.ListField(child=serializers.IntegerField(), write_only=True, required=False)
    unread_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = ChatConversation
        fields = ['id', 'subject', 'participant', 'participants', 'participant_ids', 'last_message',
                  'last_message_text', 'last_message_at', 'last_activity_at', 'is_active',
                  'unread_count', 'created_at']
        read_only_fields = ['participant', 'last_message', 'last_message_text', 'last_message_at',
                            'last_activity_at', 'created_at']


class MarkReadSerializer(serializers.Serializer):
    message_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
