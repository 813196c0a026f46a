from django.urls import path
from . import apis

app_name = 'referral'
urlpatterns = [
    path('code/', apis.MyReferralCodeView.as_view(), name='my-referral-code'),
    path('mine/', apis.MyReferralsView.as_view(), name='my-referrals'),
    path('earnings/', apis.ReferralEarningsView.as_view(), name='referral-earnings'),
    path('apply/', apis.ApplyReferralCodeView.as_view(), name='apply-referral-code'),
    path('settings/', apis.ReferralSettingsView.as_view(), name='referral-settings'),
]
