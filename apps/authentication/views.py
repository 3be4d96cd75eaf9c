import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError
from django.contrib.auth import authenticate
from django.db import transaction

from apps.core.exceptions import ResourceNotFound
from apps.core.permissions import IsPlatformAdmin
from apps.notifications.services import get_notification_service
from .models import User, InspectorProfile
from .serializers import RegisterSerializer, UserSerializer, VerificationDecisionSerializer

logger = logging.getLogger(__name__)


def _token_response(user, status_code=status.HTTP_200_OK):
    refresh = RefreshToken.for_user(user)
    return Response(
        {
            "success": True,
            "access": str(refresh.access_token),
            "refresh": str(refresh),
            "user": UserSerializer(user).data,
        },
        status=status_code,
    )


@api_view(["POST"])
@permission_classes([AllowAny])
def register_view(request):
    """
    Register a client, agent or inspector account

    POST /api/auth/register
    {
        "email": "ada@example.com",
        "password": "securepassword123",
        "first_name": "Ada",
        "last_name": "Obi",
        "role": "INSPECTOR"
    }

    Returns JWT access/refresh tokens and the created user.
    Inspectors also get an empty inspector profile so they can accept jobs.
    """
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        user = User.objects.create_user(
            email=data["email"],
            password=data["password"],
            first_name=data["first_name"].strip().title(),
            last_name=data["last_name"].strip().title(),
            phone=data["phone"],
            role=data["role"],
        )
        if user.role == User.INSPECTOR:
            InspectorProfile.objects.create(user=user)

    logger.info(f"Registered {user.role} account {user.email}")
    return _token_response(user, status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login endpoint for JWT authentication
    returns: JWT refresh and access tokens
    """
    email = (request.data.get("email") or "").strip().lower()
    password = request.data.get("password")

    if not email or not password:
        return Response({"success": False, "error": "Email and password are required"}, status=status.HTTP_400_BAD_REQUEST)

    user = authenticate(request, email=email, password=password)

    if not user:
        return Response({"success": False, "error": "Invalid email or password"}, status=status.HTTP_401_UNAUTHORIZED)

    return _token_response(user)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def logout_view(request):
    refresh_token = request.data.get("refresh") or request.COOKIES.get("refresh_token")

    if refresh_token is None:
        return Response({"success": False, "error": "No refresh token provided."}, status=status.HTTP_400_BAD_REQUEST)

    try:
        token = RefreshToken(refresh_token)
        token.blacklist()

    except TokenError as e:
        return Response({"success": False, "error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    response = Response(status=status.HTTP_204_NO_CONTENT)
    response.delete_cookie("refresh_token")

    return response


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({"success": True, "user": UserSerializer(request.user).data})


@api_view(["POST"])
@permission_classes([IsPlatformAdmin])
def verify_user_view(request, user_id):
    """
    Approve or reject a user's verification

    POST /api/admin/users/{id}/verify
    {
        "status": "VERIFIED" | "REJECTED",
        "reason": "optional rejection reason"
    }

    Only VERIFIED inspectors receive new-job notifications.
    """
    serializer = VerificationDecisionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = User.objects.get(id=user_id)
    except User.DoesNotExist:
        raise ResourceNotFound("User not found")

    decision = serializer.validated_data["status"]
    user.verification_status = decision
    user.save(update_fields=["verification_status"])

    logger.info(f"User {user.email} verification set to {decision} by {request.user.email}")

    notifier = get_notification_service()
    if decision == User.VERIFIED:
        result = notifier.notify_verification_approved(user)
    else:
        result = notifier.notify_verification_rejected(user, serializer.validated_data["reason"])

    if not result.ok:
        logger.warning(f"Verification notification for {user.email} failed: {result.error}")

    return Response(
        {
            "success": True,
            "message": f"User verification {decision.lower()}",
            "user": UserSerializer(user).data,
        }
    )
