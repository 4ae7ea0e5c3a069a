import logging

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from .models import ChatConversation, ChatMessage

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200


class ChatPermissionError(Exception):
    pass


def is_participant(conversation, user):
    return conversation.participants.filter(pk=user.pk).exists()


def conversations_for(user):
    """The user's conversations, each annotated with the user's unread count"""
    return ChatConversation.objects.filter(participants=user).annotate(
        unread_count=Count(
            'messages',
            filter=Q(messages__receiver=user, messages__is_read=False),
            distinct=True,
        )
    ).select_related('participant').prefetch_related('participants')


@transaction.atomic
def start_conversation(user, subject='', participant_ids=None):
    conversation = ChatConversation.objects.create(subject=subject, participant=user)
    conversation.participants.add(user, *(participant_ids or []))
    return conversation


def _default_receiver(conversation, sender):
    others = list(conversation.participants.exclude(pk=sender.pk)[:2])
    if len(others) == 1:
        return others[0]
    if conversation.participant_id and conversation.participant_id != sender.pk:
        return conversation.participant
    return None


@transaction.atomic
def post_message(conversation, sender, message, receiver=None, join=False, **attachment):
    """
    Store a message and update the conversation's last-message fields.
    join=True adds the sender as a participant (admins replying to a thread).
    """
    if join:
        conversation.participants.add(sender)
    elif not is_participant(conversation, sender):
        raise ChatPermissionError('You are not a participant of this conversation')

    if receiver is None:
        receiver = _default_receiver(conversation, sender)

    chat_message = ChatMessage.objects.create(
        conversation=conversation,
        sender=sender,
        receiver=receiver,
        message=message,
        **attachment
    )
    now = timezone.now()
    conversation.last_message = chat_message
    conversation.last_message_text = message[:PREVIEW_LENGTH]
    conversation.last_message_at = now
    conversation.last_activity_at = now
    conversation.save(update_fields=['last_message', 'last_message_text', 'last_message_at', 'last_activity_at'])
    return chat_message


def mark_read(user, message_ids):
    """Mark the given messages read, ignoring any the user did not receive. Returns the ids marked."""
    ids = list(ChatMessage.objects.filter(pk__in=message_ids, receiver=user).values_list('id', flat=True))
    if ids:
        ChatMessage.objects.filter(pk__in=ids).update(is_read=True)
    return ids


def unread_count(user):
    return ChatMessage.objects.filter(receiver=user, is_read=False).count()
