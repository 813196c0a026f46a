from django.contrib.auth.backends import BaseBackend
from django.contrib.auth import get_user_model
from django.db.models import Q

from account.choices import UserStatusChoices

User = get_user_model()

class EmailOrUsernameBackend(BaseBackend):
    """Authenticates with either the username or the email address; suspended users cannot sign in"""
    def authenticate(self, request, username=None, password=None, **kwargs):
        user = User.objects.filter(Q(email=username) | Q(username=username)).first()
        if not user or not user.check_password(password):
            return None

        if not user.is_active or user.status == UserStatusChoices.SUSPENDED:
            return None

        return user

    def get_user(self, user_id):
        return User.objects.filter(pk=user_id).first()
