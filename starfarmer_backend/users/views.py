# users/views.py
"""
AUTH VIEWS

Anonymous:
- register, login (verified email required)
- verify-email, resend-verification
- forgot-password, reset-password (throttled per hour)

Authenticated:
- me
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from users.serializers import (
    EmailSerializer,
    LoginSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    UserSerializer,
    VerifyEmailSerializer,
)
from users.services import accounts
from users.services.exceptions import (
    AccountNotFoundError,
    AlreadyVerifiedError,
    InvalidTokenError,
)

User = get_user_model()

logger = logging.getLogger(__name__)

VERIFICATION_RESENT = "A new verification email has been sent."


class AuthAnonThrottle(AnonRateThrottle):
    scope = "anon"


class PasswordResetThrottle(AnonRateThrottle):
    scope = "password_reset"


def _token_response(user, http_status=status.HTTP_200_OK):
    refresh = RefreshToken.for_user(user)
    return Response(
        {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "user": UserSerializer(user).data,
        },
        status=http_status,
    )


def _unverified_response(user, message: str, http_status: int):
    accounts.send_verification(user)
    return Response(
        {"detail": f"{message} {VERIFICATION_RESENT}", "is_verification_error": True},
        status=http_status,
    )


class AnonAuthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [AuthAnonThrottle]


class RegisterView(AnonAuthView):
    @extend_schema(
        request=RegisterSerializer,
        responses={201: UserSerializer, 400: OpenApiResponse(description="Invalid or taken email")},
        description="Register a customer account and send the verification email.",
        tags=["Auth"],
    )
    def post(self, request):
        data = request.data if isinstance(request.data, dict) else {}
        email = str(data.get("email") or "").strip()
        existing = User.objects.filter(email__iexact=email).first() if email else None
        if existing is not None and not existing.is_email_verified:
            return _unverified_response(
                existing, "Account exists but is not verified.", status.HTTP_400_BAD_REQUEST
            )

        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        accounts.send_verification(user)

        logger.info("User registered", extra={"user_id": str(user.id)})

        return Response(
            {
                "message": "Registration successful. Please check your email to verify your account.",
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(AnonAuthView):
    @extend_schema(
        request=LoginSerializer,
        responses={
            200: OpenApiResponse(description="access, refresh, user"),
            401: OpenApiResponse(description="Bad credentials or unverified email"),
            403: OpenApiResponse(description="Disabled account"),
        },
        tags=["Auth"],
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data["email"]
        password = serializer.validated_data["password"]

        user = User.objects.filter(email__iexact=email).first()

        if user is None or not user.check_password(password):
            return Response(
                {"detail": "Incorrect email or password"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        if not user.is_active:
            return Response(
                {"detail": "User account is disabled"},
                status=status.HTTP_403_FORBIDDEN,
            )

        if not user.is_email_verified:
            return _unverified_response(
                user, "Please verify your email first.", status.HTTP_401_UNAUTHORIZED
            )

        return _token_response(user)


class VerifyEmailView(AnonAuthView):
    @extend_schema(
        request=VerifyEmailSerializer,
        responses={200: OpenApiResponse(description="access, refresh, user"), 400: None},
        tags=["Auth"],
    )
    def post(self, request):
        serializer = VerifyEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user = accounts.verify_email(serializer.validated_data["token"])
        except InvalidTokenError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return _token_response(user)


class ResendVerificationView(AnonAuthView):
    @extend_schema(request=EmailSerializer, responses={200: None, 400: None, 404: None}, tags=["Auth"])
    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            accounts.resend_verification(serializer.validated_data["email"])
        except AccountNotFoundError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except AlreadyVerifiedError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"message": "Verification email has been sent"}, status=status.HTTP_200_OK)


class ForgotPasswordView(AnonAuthView):
    throttle_classes = [PasswordResetThrottle]

    @extend_schema(request=EmailSerializer, responses={200: None}, tags=["Auth"])
    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        accounts.request_password_reset(serializer.validated_data["email"])

        return Response(
            {"message": "If a user with this email exists, a password reset link will be sent."},
            status=status.HTTP_200_OK,
        )


class ResetPasswordView(AnonAuthView):
    throttle_classes = [PasswordResetThrottle]

    @extend_schema(
        request=ResetPasswordSerializer,
        responses={200: OpenApiResponse(description="access, refresh, user"), 400: None},
        tags=["Auth"],
    )
    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            user = accounts.reset_password(
                uid=data["uid"], token=data["token"], password=data["password"]
            )
        except InvalidTokenError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return _token_response(user)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: UserSerializer}, tags=["Auth"])
    def get(self, request):
        return Response(
            {"authenticated": True, "user": UserSerializer(request.user).data},
            status=status.HTTP_200_OK,
        )
