from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/common/', include('common.urls')),
    path('api/v1/account/', include('account.urls', namespace='account')),
    path('api/v1/payment/', include('payment.urls', namespace='payment')),
    path('api/v1/jobs/', include('job.urls', namespace='job')),
    path('api/v1/referrals/', include('referral.urls', namespace='referral')),
    path('api/v1/subscriptions/', include('subscription.urls', namespace='subscription')),
    path('api/v1/alerts/', include('alert.urls', namespace='alert')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
