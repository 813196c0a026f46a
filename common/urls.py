#only put app wide system configuration or functionality here, no urls for individual apps should be put here

from django.urls import path
from . import apis

urlpatterns = [
    path('ledger-settings/', apis.GetLedgerSettingsView.as_view(), name='get-ledger-settings')
]
