from django.db.models import F
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Conversation
from .serializers import ConversationSerializer, ConversationCreateSerializer, MessageSerializer
from .services.messaging import (
    get_or_create_conversation,
    send_message,
    broadcast_message,
    mark_conversation_read,
)


class ConversationListCreateView(generics.ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]

    def get_serializer_class(self):
        if self.request.method == "POST":
            return ConversationCreateSerializer
        return ConversationSerializer

    def get_queryset(self):
        return (
            Conversation.objects
            .filter(participants=self.request.user)
            .prefetch_related("participants")
            .order_by(F("last_message_at").desc(nulls_last=True), "-created_at")
        )

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        conversation, created = get_or_create_conversation(
            request.user, serializer.validated_data["participant"]
        )
        data = ConversationSerializer(conversation, context={"request": request}).data
        return Response(data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class ConversationMixin:
    def get_conversation(self):
        conversation = get_object_or_404(Conversation, pk=self.kwargs["conversation_id"])
        if not conversation.has_participant(self.request.user):
            raise PermissionDenied("You are not a participant of this conversation.")
        return conversation


class MessageListCreateView(ConversationMixin, generics.ListCreateAPIView):
    """Messages of a conversation, oldest first."""
    serializer_class = MessageSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return self.get_conversation().messages.select_related("sender")

    def create(self, request, *args, **kwargs):
        conversation = self.get_conversation()
        message = send_message(conversation, request.user, request.data.get("content"))
        broadcast_message(message)
        return Response(self.get_serializer(message).data, status=status.HTTP_201_CREATED)


class MarkConversationReadView(ConversationMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, conversation_id):
        updated = mark_conversation_read(self.get_conversation(), request.user)
        return Response({"updated": updated})
