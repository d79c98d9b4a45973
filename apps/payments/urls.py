from django.urls import path
from .views import (
    MilestonePaymentView,
    PayAllMilestonesView,
    campay_webhook,
    PaymentReturnView,
    PaymentFailedView,
    PaymentRefreshView,
    MyPaymentsView,
    PaymentDetailView,
    ProjectPaymentsView,
    EarningsSummaryView,
    WithdrawalView,
    GatewayBalanceView,
    GatewayHistoryView,
)

urlpatterns = [
    # Campay callbacks
    path('payment-status/', campay_webhook, name='campay-webhook'),
    path('payments/status/', PaymentReturnView.as_view(), name='payment-return'),
    path('payments/failed/', PaymentFailedView.as_view(), name='payment-failed'),

    # Initiation
    path('projects/<int:project_id>/milestones/<str:milestone_id>/pay/', MilestonePaymentView.as_view(), name='milestone-pay'),
    path('projects/<int:project_id>/pay-all/', PayAllMilestonesView.as_view(), name='milestone-pay-all'),
    path('projects/<int:project_id>/payments/', ProjectPaymentsView.as_view(), name='project-payments'),

    path('payments/', MyPaymentsView.as_view(), name='payment-list'),
    path('payments/earnings/', EarningsSummaryView.as_view(), name='payment-earnings'),
    path('payments/withdraw/', WithdrawalView.as_view(), name='payment-withdraw'),
    path('payments/gateway/balance/', GatewayBalanceView.as_view(), name='gateway-balance'),
    path('payments/gateway/history/', GatewayHistoryView.as_view(), name='gateway-history'),
    path('payments/<uuid:pk>/', PaymentDetailView.as_view(), name='payment-detail'),
    path('payments/<uuid:pk>/refresh/', PaymentRefreshView.as_view(), name='payment-refresh'),
]
