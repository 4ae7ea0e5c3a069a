from django.contrib import admin
from .models import ChatConversation, ChatMessage


@admin.register(ChatConversation)
class ChatConversationAdmin(admin.ModelAdmin):
    list_display = ['id', 'subject', 'participant', 'last_message_at', 'is_active']
    list_filter = ['is_active']
    search_fields = ['subject', 'last_message_text']


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'conversation', 'sender', 'receiver', 'is_read', 'created_at']
    list_filter = ['is_read']
    search_fields = ['message']
