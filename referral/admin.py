from django.contrib import admin

from .models import Referral, ReferralSetting


@admin.register(Referral)
class ReferralAdmin(admin.ModelAdmin):
    list_display = ("referrer", "referred", "referral_code", "total_earnings", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("referrer__username", "referred__username", "referral_code")


admin.site.register(ReferralSetting)
