import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from gastro.core.models import User
from gastro.core.permissions import IsAdminRole
from gastro.core.utils import parse_bool, parse_int
from .models import ChatConversation, ChatMessage
from .serializers import ChatConversationSerializer, ChatMessageSerializer, MarkReadSerializer
from .services import (
    ChatPermissionError, conversations_for, start_conversation, post_message, mark_read,
    unread_count, is_participant
)

logger = logging.getLogger(__name__)

ATTACHMENT_FIELDS = ('attachment_url', 'attachment_type', 'attachment_data', 'attachment_size')


def _paginate(queryset, params, default_limit=50):
    offset = parse_int(params.get('offset'), 0, minimum=0)
    limit = parse_int(params.get('limit'), default_limit, minimum=1, maximum=200)
    return queryset[offset:offset + limit]


def _create_message(request, join=False):
    serializer = ChatMessageSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    attachment = {field: data[field] for field in ATTACHMENT_FIELDS if field in data}
    try:
        message = post_message(data['conversation'], request.user, data['message'],
                               receiver=data.get('receiver'), join=join, **attachment)
    except ChatPermissionError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def conversation_list_create(request):
    """The caller's conversations with unread counts, or start one"""
    if request.method == 'GET':
        serializer = ChatConversationSerializer(conversations_for(request.user), many=True)
        return Response(serializer.data)

    serializer = ChatConversationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    requested = serializer.validated_data.get('participant_ids', [])
    participant_ids = list(User.objects.filter(pk__in=requested, is_active=True).values_list('id', flat=True))
    conversation = start_conversation(request.user, serializer.validated_data.get('subject', ''), participant_ids)
    logger.info(f"Conversation {conversation.id} started by user {request.user.id}")
    return Response(ChatConversationSerializer(conversation).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def message_list_create(request):
    """
    GET ?conversation=&limit=&offset=&unread_only= lists messages of a
    conversation the caller takes part in, or every message the caller
    sent or received. POST sends a message as the caller.
    """
    if request.method == 'POST':
        return _create_message(request)

    params = request.query_params
    conversation_id = parse_int(params.get('conversation'))
    messages = ChatMessage.objects.select_related('sender')
    if conversation_id:
        conversation = ChatConversation.objects.filter(pk=conversation_id).first()
        if conversation is None or not is_participant(conversation, request.user):
            return Response({'error': 'You do not have access to this conversation'},
                            status=status.HTTP_403_FORBIDDEN)
        messages = messages.filter(conversation=conversation)
    else:
        messages = messages.filter(sender=request.user) | messages.filter(receiver=request.user)
    if parse_bool(params.get('unread_only'), False):
        messages = messages.filter(is_read=False)
    serializer = ChatMessageSerializer(_paginate(messages.order_by('created_at', 'id'), params), many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def message_mark_read(request):
    """Mark messages the caller received as read: {message_ids: [...]}"""
    serializer = MarkReadSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'message_ids must be a non-empty list of ids'},
                        status=status.HTTP_400_BAD_REQUEST)
    marked = mark_read(request.user, serializer.validated_data['message_ids'])
    if not marked:
        return Response({'error': 'No permission to mark these messages as read'},
                        status=status.HTTP_403_FORBIDDEN)
    return Response({'success': True, 'marked': marked})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unread_message_count(request):
    return Response({'unread_count': unread_count(request.user)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_conversation_list(request):
    """Every conversation, most recently active first"""
    conversations = ChatConversation.objects.select_related('participant').prefetch_related('participants')
    active = parse_bool(request.query_params.get('active'))
    if active is not None:
        conversations = conversations.filter(is_active=active)
    serializer = ChatConversationSerializer(conversations, many=True)
    return Response(serializer.data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_message_list_create(request):
    """GET ?conversation= (required) lists a thread; POST replies, joining the conversation"""
    if request.method == 'POST':
        return _create_message(request, join=True)

    conversation_id = parse_int(request.query_params.get('conversation'))
    if not conversation_id:
        return Response({'error': 'conversation query parameter is required'},
                        status=status.HTTP_400_BAD_REQUEST)
    conversation = get_object_or_404(ChatConversation, pk=conversation_id)
    messages = conversation.messages.select_related('sender').order_by('created_at', 'id')
    serializer = ChatMessageSerializer(_paginate(messages, request.query_params), many=True)
    return Response(serializer.data)
