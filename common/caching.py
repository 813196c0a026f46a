from django.core.cache import cache
from rest_framework.response import Response


def cache_response_decorator(cache_prefix: str, cache_timeout: int = 60 * 10, per_user: bool = False):
    """
    Decorator to cache the response of a view function.

    The cache key is constructed using the provided prefix, HTTP method, and full request path.
    For user-specific caching, the id of the currently logged in user is included in the cache key
    so that a single user's entries can be invalidated with invalidate_cache_pattern.

    Args:
        cache_prefix (str): The prefix to use for the cache key
        cache_timeout (int): The timeout for the cache in seconds (default is 10 minutes)
        per_user (bool): Whether to include the user ID in the cache key (default is False)

    Example:
        @cache_response_decorator('user_transaction_history', cache_timeout=300, per_user=True)
        def get(self, request):
            return Response(data)
    """
    def decorator(view_func):
        def wrapper(self, request, *args, **kwargs):
            if per_user:
                cache_key = f"{cache_prefix}_{request.user.id}_{request.method}_{request.get_full_path()}"
            else:
                cache_key = f"{cache_prefix}_{request.method}_{request.get_full_path()}"

            cached_response = cache.get(cache_key)
            if cached_response:
                return Response(
                    cached_response.get("data", {}),
                    status=cached_response.get("status", 200),
                )
            response = view_func(self, request, *args, **kwargs)

            if request.method == "GET" and response.status_code == 200:
                cache_data = {
                    "data": response.data,
                    "status": response.status_code,
                }
                cache.set(cache_key, cache_data, cache_timeout)
            return response

        return wrapper
    return decorator


def invalidate_cache_pattern(pattern: str):
    """
    Delete every cache key matching a glob pattern.

    Pattern deletion is a django-redis feature; the local-memory backend used in development
    and tests has no key listing, so there the whole cache is cleared instead.
    """
    delete_pattern = getattr(cache, "delete_pattern", None)
    if delete_pattern is not None:
        delete_pattern(pattern)
    else:
        cache.clear()
