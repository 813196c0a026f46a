from django.urls import path
from . import apis
app_name = 'account'
urlpatterns = [
    path('login/', apis.LoginView.as_view(), name='login'),
    path('register/', apis.RegisterView.as_view(), name='register'),
    path('token/refresh/', apis.CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('user/detail/', apis.UserDetailView.as_view(), name='user-detail'),
    path('wallet/', apis.WalletView.as_view(), name='wallet'),
    path('admin/users/', apis.AdminListUsersView.as_view(), name='admin-list-users'),
    path('admin/users/<int:user_id>/', apis.AdminUpdateUserView.as_view(), name='admin-update-user'),
]
