"""Main API URL router for /api/v1/."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from api.v1 import views as v1_views
from api.v1 import lead_views as lead_api_views
from api.auth_views import (
    ForgotPasswordAPIView,
    LoginAPIView,
    LogoutAPIView,
    RefreshAPIView,
    RegisterAPIView,
    ResetPasswordAPIView,
    VerifyResetCodeAPIView,
)

router = DefaultRouter()
router.register(r'users', v1_views.UserViewSet)
router.register(r'stores', v1_views.StoreViewSet)
router.register(r'purchase-orders', v1_views.PurchaseOrderViewSet)
router.register(r'leads', lead_api_views.LeadViewSet)
router.register(r'notifications', v1_views.NotificationViewSet, basename='notification')


app_name = 'api'
urlpatterns = [
    path('leads/bulk-upload/', lead_api_views.bulk_upload_view, name='lead-bulk-upload'),
    path('', include(router.urls)),

    # Auth endpoints
    path('auth/register/', RegisterAPIView.as_view(), name='auth-register'),
    path('auth/login/', LoginAPIView.as_view(), name='auth-login'),
    path('auth/token/refresh/', RefreshAPIView.as_view(), name='token_refresh'),
    path('auth/logout/', LogoutAPIView.as_view(), name='auth-logout'),
    path('auth/me/', v1_views.MeView.as_view(), name='auth-me'),
    path('auth/forgot-password/', ForgotPasswordAPIView.as_view(), name='auth-forgot-password'),
    path('auth/verify-reset-code/', VerifyResetCodeAPIView.as_view(), name='auth-verify-reset-code'),
    path('auth/reset-password/', ResetPasswordAPIView.as_view(), name='auth-reset-password'),
]
