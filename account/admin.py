from django.contrib import admin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ("username", "email", "role", "status", "deposit_balance", "earning_balance", "total_earnings")
    list_filter = ("role", "status", "is_admin")
    search_fields = ("username", "email", "name", "referral_code")
    readonly_fields = ("referral_code", "date_joined", "last_activity")
