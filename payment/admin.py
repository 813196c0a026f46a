from django.contrib import admin

from payment.models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "transaction_type", "amount", "status", "created_at")
    list_filter = ("transaction_type", "status")
    search_fields = ("user__username", "reference_id", "description")
    readonly_fields = [field.name for field in Transaction._meta.fields]

    def has_delete_permission(self, request, obj=None):
        return False
