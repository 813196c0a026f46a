from django.contrib.auth import authenticate
from rest_framework import serializers

from .choices import UserRoleChoices, UserStatusChoices
from .models import CustomUser


class UserSerializer(serializers.ModelSerializer):
    """Serializer for the user model"""

    roles = serializers.SerializerMethodField()

    class Meta:
        model = CustomUser
        fields = [
            "id",
            "username",
            "email",
            "name",
            "role",
            "is_admin",
            "roles",
            "referral_code",
        ]

    def get_roles(self, obj):
        roles = [obj.role]
        if obj.is_superuser and UserRoleChoices.SUPERADMIN not in roles:
            roles.append(UserRoleChoices.SUPERADMIN)
        if obj.is_admin and UserRoleChoices.ADMIN not in roles:
            roles.append(UserRoleChoices.ADMIN)
        return roles


class UserDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = [
            "id",
            "username",
            "email",
            "name",
            "role",
            "status",
            "is_admin",
            "deposit_balance",
            "earning_balance",
            "total_earnings",
            "completed_jobs",
            "active_jobs",
            "referral_code",
            "referred_by",
            "date_joined",
            "last_activity",
        ]


class SimpleUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = ["id", "username", "name", "email"]


class WalletSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = ["deposit_balance", "earning_balance", "total_earnings"]


class LoginSerializer(serializers.Serializer):
    """Serializer for user login"""

    username = serializers.CharField(help_text="Username or email address")
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(username=data["username"], password=data["password"])
        if not user:
            raise serializers.ValidationError("Invalid credentials")
        return user


class RegisterSerializer(serializers.ModelSerializer):
    """Serializer for user registration"""

    password = serializers.CharField(
        write_only=True,
        min_length=8,
    )
    role = serializers.ChoiceField(
        choices=[(UserRoleChoices.USER, "User"), (UserRoleChoices.EMPLOYER, "Employer")],
        default=UserRoleChoices.USER,
    )
    referral_code = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = CustomUser
        fields = ["id", "username", "email", "name", "password", "role", "referral_code"]
        extra_kwargs = {
            "username": {"error_messages": {"unique": "Username already exists"}},
            "email": {"error_messages": {"unique": "Email already exists"}},
        }

    def create(self, validated_data):
        password = validated_data.pop("password")
        validated_data.pop("referral_code", None)

        user = CustomUser(**validated_data)
        # Set the password (this will hash it)
        user.set_password(password)
        user.save()
        return user

    def validate_email(self, value):
        if CustomUser.objects.filter(email=value).exists():
            raise serializers.ValidationError("Email already exists")
        return value

    def validate_username(self, value):
        if CustomUser.objects.filter(username=value).exists():
            raise serializers.ValidationError("Username already exists")
        return value

    def validate_referral_code(self, value):
        if value and not CustomUser.objects.filter(referral_code=value.strip().upper()).exists():
            raise serializers.ValidationError("Invalid referral code")
        return value.strip().upper() if value else value


class AdminUpdateUserSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    email = serializers.EmailField(required=False)
    role = serializers.ChoiceField(choices=UserRoleChoices.choices, required=False)
    status = serializers.ChoiceField(choices=UserStatusChoices.choices, required=False)
    is_active = serializers.BooleanField(required=False)
    deposit_balance = serializers.DecimalField(max_digits=14, decimal_places=4, min_value=0, required=False)
    earning_balance = serializers.DecimalField(max_digits=14, decimal_places=4, min_value=0, required=False)
    total_earnings = serializers.DecimalField(max_digits=14, decimal_places=4, min_value=0, required=False)
    completed_jobs = serializers.IntegerField(min_value=0, required=False)
    active_jobs = serializers.IntegerField(min_value=0, required=False)


class TokenRefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField(
        help_text="The refresh token to obtain a new access token."
    )


class TokenRefreshResponseSerializer(serializers.Serializer):
    access = serializers.CharField(help_text="The new access token.")
    refresh = serializers.CharField(help_text="The new refresh token.", required=False)


# Set of Serializers to use for api doc example and documentation
# ==============================================================
class UserDetailResponseSerializer(serializers.Serializer):
    status = serializers.CharField()
    user = UserDetailSerializer()
