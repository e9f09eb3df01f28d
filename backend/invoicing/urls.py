"""URL routing for the invoicing API."""

from django.urls import include, path
from rest_framework.permissions import AllowAny
from rest_framework.routers import DefaultRouter
from rest_framework_nested import routers
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views.clients import ClientInvoiceViewSet, ClientViewSet
from .views.common import analytics_report, dashboard_summary, financial_report
from .views.expenses import ExpenseCategoryViewSet, ExpenseViewSet, balance_summary
from .views.invoices import InvoiceViewSet
from .views.notifications import NotificationViewSet
from .views.search import search
from .views.settings import UserSettingsViewSet, app_state

router = DefaultRouter()
router.register(r'settings', UserSettingsViewSet, basename='user-settings')
router.register(r'clients', ClientViewSet, basename='client')
router.register(r'invoices', InvoiceViewSet, basename='invoice')
router.register(r'expense-categories', ExpenseCategoryViewSet, basename='expense-category')
router.register(r'expenses', ExpenseViewSet, basename='expense')
router.register(r'notifications', NotificationViewSet, basename='notification')

clients_router = routers.NestedSimpleRouter(router, r'clients', lookup='client')
clients_router.register(r'invoices', ClientInvoiceViewSet, basename='client-invoices')

urlpatterns = [
    path(
        'token/',
        TokenObtainPairView.as_view(permission_classes=[AllowAny]),
        name='get_token',
    ),
    path(
        'token/refresh/',
        TokenRefreshView.as_view(permission_classes=[AllowAny]),
        name='refresh_token',
    ),
    path('dashboard-summary/', dashboard_summary, name='dashboard-summary'),
    path('analytics/', analytics_report, name='analytics-report'),
    path('balance-summary/', balance_summary, name='balance-summary'),
    path('search/', search, name='global-search'),
    path('state/', app_state, name='app-state'),
    path('reports/financial/', financial_report, name='financial-report'),
    path('', include(router.urls)),
    path('', include(clients_router.urls)),
]
