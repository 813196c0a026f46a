from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import generics

from common.responses import SuccessResponse
from common.utils import get_ledger_setting


class GetLedgerSettingsView(generics.GenericAPIView):
    @extend_schema(summary="Get the effective ledger constants (minimum job spend, commission and fee rates)")
    def get(self, request, *args, **kwargs):
        data = {key.lower(): str(get_ledger_setting(key.lower())) for key in settings.LEDGER}
        return SuccessResponse(message="Ledger settings", data=data)
