from django.conf import settings
from django.db import models


class ChatConversation(models.Model):
    """Support conversation between marketplace users and admins"""
    participants = models.ManyToManyField(settings.AUTH_USER_MODEL, related_name='chat_conversations')
    participant = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='started_conversations',
                                    help_text="Main non-admin participant")
    subject = models.CharField(max_length=255, blank=True)
    last_message = models.ForeignKey('ChatMessage', on_delete=models.SET_NULL, null=True, blank=True,
                                     related_name='+')
    last_message_text = models.TextField(blank=True)
    last_message_at = models.DateTimeField(null=True, blank=True)
    last_activity_at = models.DateTimeField(auto_now_add=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.subject or f"Conversation {self.pk}"

    class Meta:
        db_table = 'chat_conversations'
        ordering = ['-last_activity_at', '-id']


class ChatMessage(models.Model):
    conversation = models.ForeignKey(ChatConversation, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages')
    receiver = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name='received_messages')
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    attachment_url = models.URLField(max_length=500, blank=True)
    attachment_type = models.CharField(max_length=100, blank=True)
    attachment_data = models.TextField(blank=True, help_text="Base64 encoded attachment")
    attachment_size = models.IntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.sender} -> {self.receiver}: {self.message[:40]}"

    class Meta:
        db_table = 'chat_messages'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['receiver', 'is_read'], name='idx_chat_receiver_read'),
        ]
