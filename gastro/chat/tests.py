"""
Test suite for Chat module
Tests: conversations, messages, read receipts, unread counts, admin replies
"""
from django.test import TestCase
from rest_framework import status

from gastro.chat.models import ChatConversation, ChatMessage
from gastro.chat.services import ChatPermissionError, post_message, mark_read, unread_count
from gastro.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ChatServiceTests(TestCase):
    def setUp(self):
        self.buyer = TestDataFactory.create_user()
        self.supplier = TestDataFactory.create_supplier()
        self.conversation = TestDataFactory.create_conversation([self.buyer, self.supplier], subject='Orçamento')

    def test_default_receiver_is_other_participant(self):
        message = post_message(self.conversation, self.buyer, 'Olá, tem estoque?')
        self.assertEqual(message.receiver, self.supplier)
        self.conversation.refresh_from_db()
        self.assertEqual(self.conversation.last_message_id, message.id)
        self.assertEqual(self.conversation.last_message_text, 'Olá, tem estoque?')

    def test_outsider_cannot_post(self):
        with self.assertRaises(ChatPermissionError):
            post_message(self.conversation, TestDataFactory.create_user(), 'oi')

    def test_join_adds_participant(self):
        admin = TestDataFactory.create_admin()
        message = post_message(self.conversation, admin, 'Posso ajudar?', join=True)
        self.assertTrue(self.conversation.participants.filter(pk=admin.pk).exists())
        self.assertEqual(message.receiver, self.buyer)

    def test_mark_read_only_received(self):
        to_supplier = post_message(self.conversation, self.buyer, 'primeira')
        to_buyer = post_message(self.conversation, self.supplier, 'resposta')
        self.assertEqual(unread_count(self.supplier), 1)
        marked = mark_read(self.supplier, [to_supplier.id, to_buyer.id])
        self.assertEqual(marked, [to_supplier.id])
        self.assertEqual(unread_count(self.supplier), 0)
        self.assertFalse(ChatMessage.objects.get(pk=to_buyer.pk).is_read)


class ChatAPITests(TestCase):
    def setUp(self):
        self.buyer = TestDataFactory.create_user()
        self.supplier = TestDataFactory.create_supplier()
        self.outsider = TestDataFactory.create_user()
        self.conversation = TestDataFactory.create_conversation([self.buyer, self.supplier])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.buyer)

    def test_requires_auth(self):
        self.client.logout()
        response = self.client.get('/api/v1/chat/conversations/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_start_conversation(self):
        response = self.client.post('/api/v1/chat/conversations/', {
            'subject': 'Garantia', 'participant_ids': [self.supplier.id, 999999]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        conversation = ChatConversation.objects.get(pk=response.data['id'])
        self.assertEqual(set(conversation.participants.values_list('id', flat=True)),
                         {self.buyer.id, self.supplier.id})
        self.assertEqual(response.data['participant'], self.buyer.id)

    def test_conversations_with_unread_counts(self):
        TestDataFactory.create_message(self.conversation, self.supplier, receiver=self.buyer)
        TestDataFactory.create_message(self.conversation, self.supplier, receiver=self.buyer)
        TestDataFactory.create_message(self.conversation, self.buyer, receiver=self.supplier)
        TestDataFactory.create_conversation([self.outsider, self.supplier])
        response = self.client.get('/api/v1/chat/conversations/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['unread_count'], 2)

    def test_send_message(self):
        response = self.client.post('/api/v1/chat/messages/', {
            'conversation': self.conversation.id, 'message': 'Qual o prazo de entrega?'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sender'], self.buyer.id)
        self.assertEqual(response.data['receiver'], self.supplier.id)

    def test_empty_message_rejected(self):
        response = self.client.post('/api/v1/chat/messages/', {
            'conversation': self.conversation.id, 'message': '   '
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_outsider_blocked(self):
        self.client.authenticate_user(self.outsider)
        response = self.client.get(f'/api/v1/chat/messages/?conversation={self.conversation.id}')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.post('/api/v1/chat/messages/', {
            'conversation': self.conversation.id, 'message': 'intruso'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_thread_paginated(self):
        for i in range(3):
            TestDataFactory.create_message(self.conversation, self.supplier, receiver=self.buyer, message=f'm{i}')
        response = self.client.get(f'/api/v1/chat/messages/?conversation={self.conversation.id}&limit=2&offset=1')
        self.assertEqual([m['message'] for m in response.data], ['m1', 'm2'])

    def test_unread_only_without_conversation(self):
        read = TestDataFactory.create_message(self.conversation, self.supplier, receiver=self.buyer)
        read.is_read = True
        read.save()
        TestDataFactory.create_message(self.conversation, self.supplier, receiver=self.buyer, message='novo')
        TestDataFactory.create_message(self.conversation, self.supplier, receiver=self.outsider)
        response = self.client.get('/api/v1/chat/messages/?unread_only=true')
        self.assertEqual([m['message'] for m in response.data], ['novo'])

    def test_mark_read_endpoint(self):
        message = TestDataFactory.create_message(self.conversation, self.supplier, receiver=self.buyer)
        response = self.client.post('/api/v1/chat/messages/read/', {'message_ids': [message.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True, 'marked': [message.id]})

        count = self.client.get('/api/v1/chat/unread-count/')
        self.assertEqual(count.data['unread_count'], 0)

    def test_mark_read_rejects_foreign_and_empty(self):
        sent = TestDataFactory.create_message(self.conversation, self.buyer, receiver=self.supplier)
        response = self.client.post('/api/v1/chat/messages/read/', {'message_ids': [sent.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.post('/api/v1/chat/messages/read/', {'message_ids': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AdminChatTests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.buyer = TestDataFactory.create_user()
        self.conversation = TestDataFactory.create_conversation([self.buyer], subject='Suporte')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_non_admin_forbidden(self):
        self.client.authenticate_user(self.buyer)
        response = self.client.get('/api/v1/admin/chat/conversations/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_sees_all_conversations(self):
        TestDataFactory.create_conversation([TestDataFactory.create_user()])
        response = self.client.get('/api/v1/admin/chat/conversations/')
        self.assertEqual(len(response.data), 2)

    def test_admin_reply_joins_and_targets_starter(self):
        response = self.client.post('/api/v1/admin/chat/messages/', {
            'conversation': self.conversation.id, 'message': 'Em que posso ajudar?'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['receiver'], self.buyer.id)
        self.assertTrue(self.conversation.participants.filter(pk=self.admin.pk).exists())

    def test_admin_thread_requires_conversation(self):
        response = self.client.get('/api/v1/admin/chat/messages/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get(f'/api/v1/admin/chat/messages/?conversation={self.conversation.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
