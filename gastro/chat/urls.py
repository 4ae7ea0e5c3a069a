from django.urls import path
from . import views

urlpatterns = [
    path('chat/conversations/', views.conversation_list_create, name='chat-conversations'),
    path('chat/messages/', views.message_list_create, name='chat-messages'),
    path('chat/messages/read/', views.message_mark_read, name='chat-messages-read'),
    path('chat/unread-count/', views.unread_message_count, name='chat-unread-count'),
    path('admin/chat/conversations/', views.admin_conversation_list, name='admin-chat-conversations'),
    path('admin/chat/messages/', views.admin_message_list_create, name='admin-chat-messages'),
]
