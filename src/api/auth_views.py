"""Authentication API views: registration, role-checked JWT login, password reset."""

import logging

from django.core.exceptions import ImproperlyConfigured
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from accounts.services import register_user, request_password_reset, reset_password, verify_reset_code
from api.v1.serializers import (
    ForgotPasswordSerializer,
    LoginSerializer,
    LogoutSerializer,
    MeSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    VerifyResetCodeSerializer,
)

logger = logging.getLogger("crm")


class SafeScopedRateThrottle(ScopedRateThrottle):
    """Scoped throttle that falls back to a strict default if scope config is missing."""

    def get_rate(self):
        try:
            return super().get_rate()
        except ImproperlyConfigured:
            logger.warning("Throttle scope '%s' not configured, applying strict default 5/min.", self.scope)
            return "5/min"


class RegisterAPIView(APIView):
    """Public sign-up. The first account becomes the administrator."""

    permission_classes = [permissions.AllowAny]
    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_burst"

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = register_user(**serializer.validated_data)
        return Response(
            {
                "message": "User registered successfully",
                "user": MeSerializer(user, context={"request": request}).data,
            },
            status=status.HTTP_201_CREATED,
        )


class BearerChallengeMixin:
    """Keep token failures on unauthenticated views a 401 instead of a 403."""

    def get_authenticate_header(self, request):
        return 'Bearer realm="api"'


class LoginAPIView(BearerChallengeMixin, TokenObtainPairView):
    """Issue a JWT pair when the credentials match the selected role."""

    serializer_class = LoginSerializer
    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_burst"
    permission_classes = [permissions.AllowAny]


class RefreshAPIView(BearerChallengeMixin, TokenRefreshView):
    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_sustained"
    permission_classes = [permissions.AllowAny]


class LogoutAPIView(APIView):
    """Blacklist the supplied refresh token."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            RefreshToken(serializer.validated_data["refresh"]).blacklist()
        except TokenError as exc:
            logger.info("Logout with unusable refresh token for %s: %s", request.user.email, exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ForgotPasswordAPIView(APIView):
    """Request a reset code by email (same answer whether or not the account exists)."""

    permission_classes = [permissions.AllowAny]
    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_burst"

    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        request_password_reset(serializer.validated_data["email"])
        return Response(
            {"message": "If the email exists, a verification code has been sent"},
            status=status.HTTP_200_OK,
        )


class VerifyResetCodeAPIView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_burst"

    def post(self, request):
        serializer = VerifyResetCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        verify_reset_code(**serializer.validated_data)
        return Response({"message": "Code verified successfully"}, status=status.HTTP_200_OK)


class ResetPasswordAPIView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_burst"

    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reset_password(**serializer.validated_data)
        return Response(
            {"message": "Password has been reset successfully"},
            status=status.HTTP_200_OK,
        )
