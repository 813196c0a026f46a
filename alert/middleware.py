from channels.middleware import BaseMiddleware
from channels.db import database_sync_to_async
from django.contrib.auth.models import AnonymousUser
from urllib.parse import parse_qs
from rest_framework_simplejwt.tokens import UntypedToken
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from account.models import CustomUser


@database_sync_to_async
def get_user(user_id):
    try:
        return CustomUser.objects.get(id=user_id)
    except CustomUser.DoesNotExist:
        return AnonymousUser()


class JWTAuthMiddleWare(BaseMiddleware):
    """
    Authenticates WebSocket connections with the access token passed as the `token` query parameter
    and sets the user on the connection scope. Missing or invalid tokens leave an AnonymousUser,
    which the consumers refuse.
    """

    async def __call__(self, scope, receive, send):
        query_params = parse_qs(scope["query_string"].decode())
        token = query_params.get("token", [None])[0]

        if token:
            try:
                user_id = UntypedToken(token=token)["user_id"]
                scope["user"] = await get_user(user_id)
            except (InvalidToken, TokenError):
                scope["user"] = AnonymousUser()
        else:
            scope["user"] = AnonymousUser()

        return await super().__call__(scope, receive, send)
