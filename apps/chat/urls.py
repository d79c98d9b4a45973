from django.urls import path
from .views import ConversationListCreateView, MessageListCreateView, MarkConversationReadView

urlpatterns = [
    path('conversations/', ConversationListCreateView.as_view(), name='conversation-list'),
    path('conversations/<int:conversation_id>/messages/', MessageListCreateView.as_view(), name='conversation-messages'),
    path('conversations/<int:conversation_id>/read/', MarkConversationReadView.as_view(), name='conversation-read'),
]
