import logging

from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from common.exceptions import LedgerError
from common.responses import ErrorResponse, SuccessResponse, format_first_error, ledger_error_response
from referral.services import apply_referral_code

from .models import CustomUser
from .serializers import (
    AdminUpdateUserSerializer,
    LoginSerializer,
    RegisterSerializer,
    TokenRefreshResponseSerializer,
    TokenRefreshSerializer,
    UserDetailResponseSerializer,
    UserDetailSerializer,
    UserSerializer,
    WalletSerializer,
)
from .services import admin_update_user
from .utils import IsAdminUser

logger = logging.getLogger(__name__)


class LoginView(APIView):
    """User login view to generate JWT token"""

    permission_classes = [AllowAny]

    @extend_schema(
        summary="User Login",
        description="Authenticate with username or email and return access & refresh tokens along with the user's roles.",
        request=LoginSerializer,
        responses={
            200: OpenApiResponse(
                response=None,
                description="Successful login response with tokens and user data",
                examples=[
                    OpenApiExample(
                        "Login Success",
                        value={
                            "status": "success",
                            "refresh": "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9...",
                            "access": "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9...",
                            "user_data": {
                                "id": 1,
                                "username": "john_doe",
                                "email": "john@example.com",
                                "name": "John Doe",
                                "role": "employer",
                                "is_admin": False,
                                "roles": ["employer"],
                                "referral_code": "JOH7K2M9Q",
                            },
                        },
                        response_only=True,
                    )
                ],
            ),
            401: OpenApiResponse(response=None, description="Invalid credentials"),
        },
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.validated_data
            refresh = RefreshToken.for_user(user)
            logger.info(f"User '{user.username}' logged in successfully")

            return Response(
                {
                    "status": "success",
                    "refresh": str(refresh),
                    "access": str(refresh.access_token),
                    "user_data": UserSerializer(user).data,
                }
            )

        logger.warning(f"Failed login attempt for username '{request.data.get('username')}'")
        return Response(
            {"status": "error", "error": "Invalid Credentials"},
            status=status.HTTP_401_UNAUTHORIZED,
        )


class RegisterView(APIView):
    """User registration endpoint"""

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Register a new user",
        description="Creates a new user account. An optional referral code links the new user to the referrer.",
        request=RegisterSerializer,
        responses={201: RegisterSerializer},
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)

        if serializer.is_valid():
            user = serializer.save()
            referral_code = serializer.validated_data.get("referral_code")
            if referral_code:
                try:
                    apply_referral_code(user, referral_code)
                except LedgerError as e:
                    logger.warning(f"Referral code '{referral_code}' not applied to '{user.username}': {e}")
            logger.info(f"New user '{user.username}' registered successfully")
            return Response(
                {"status": "success", "user_data": RegisterSerializer(user).data},
                status=status.HTTP_201_CREATED,
            )

        # Custom error messages for validation errors
        if "username" in serializer.errors:
            error_message = "Username already exists"
        elif "email" in serializer.errors:
            error_message = "Email already exists"
        else:
            error_message = format_first_error(serializer.errors, with_key=False)

        logger.warning(f"Failed registration attempt for username '{request.data.get('username')}'. Error: {error_message}")
        return Response(
            {"status": "error", "error": error_message},
            status=status.HTTP_400_BAD_REQUEST,
        )


class CustomTokenRefreshView(TokenRefreshView):
    """
    Custom refresh token endpoint with drf-spectacular documentation.
    """

    @extend_schema(
        summary="Refresh JWT access token",
        description="Exchanges a refresh token for a new access token.",
        request=TokenRefreshSerializer,
        responses={
            200: TokenRefreshResponseSerializer,
            401: {"status": "error", "detail": "Invalid credentials....."},
        },
    )
    def post(self, request, *args, **kwargs):
        try:
            response = super().post(request, *args, **kwargs)
            return Response(
                {
                    "status": "success",
                    "access": response.data["access"],
                    "refresh": response.data.get("refresh", ""),
                },
                status=status.HTTP_200_OK,
            )

        except (AuthenticationFailed, InvalidToken, TokenError):
            logger.warning("Failed token refresh attempt")
            return Response(
                {
                    "status": "error",
                    "detail": "Your session has expired. Please log in again.",
                },
                status=status.HTTP_401_UNAUTHORIZED,
            )


class UserDetailView(APIView):
    """
    Endpoint to get the authenticated user's detail
    """

    @extend_schema(
        summary="Get current authenticated user's details",
        description="Returns the profile, balances and counters of the currently authenticated user.",
        responses={200: UserDetailResponseSerializer},
    )
    def get(self, request):
        serializer = UserDetailSerializer(request.user)
        return Response(
            {"status": "success", "user": serializer.data}, status=status.HTTP_200_OK
        )


class WalletView(generics.GenericAPIView):
    serializer_class = WalletSerializer

    @extend_schema(summary="Get the authenticated user's deposit and earning balances")
    def get(self, request, *args, **kwargs):
        user = CustomUser.objects.get(pk=request.user.pk)
        return SuccessResponse(message="Wallet", data=self.get_serializer(user).data)


class AdminListUsersView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, IsAdminUser]
    serializer_class = UserDetailSerializer

    def get_queryset(self):
        queryset = CustomUser.objects.all().order_by("-date_joined")
        role = self.request.query_params.get("role")
        if role:
            queryset = queryset.filter(role=role)
        return queryset

    @extend_schema(summary="List platform users (admin only)")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminUpdateUserView(generics.GenericAPIView):
    permission_classes = [IsAuthenticated, IsAdminUser]
    serializer_class = AdminUpdateUserSerializer

    @extend_schema(
        summary="Edit a user's profile, counters or balances (admin only)",
        description="Privileged overwrite used for manual corrections. Balances set here bypass the ledger and are audited in the logs.",
    )
    def patch(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors), status=status.HTTP_400_BAD_REQUEST)

        try:
            user = CustomUser.objects.get(id=kwargs.get("user_id"))
        except CustomUser.DoesNotExist:
            return ErrorResponse(message="User not found", status=status.HTTP_404_NOT_FOUND)

        try:
            user = admin_update_user(request.user, user, **serializer.validated_data)
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="User updated", data=UserDetailSerializer(user).data)
