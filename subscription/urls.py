from django.urls import path
from . import apis

app_name = 'subscription'
urlpatterns = [
    path("plans/", apis.ListSubscriptionPlansView.as_view(), name="subscription-plans"),
    path("subscribe/", apis.SubscribeToPlanView.as_view(), name="subscribe"),
    path("my-plan/", apis.CurrentSubscriptionView.as_view(), name="my-plan"),
]
