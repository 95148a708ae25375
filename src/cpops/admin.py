"""Django admin configuration for cPOP models."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from unfold.admin import ModelAdmin, TabularInline

from cpops.models import Claim, Cpop


class ClaimInline(TabularInline):  # type: ignore[misc]
    model = Claim
    extra = 0
    fields = ["wallet_address", "status", "signature", "distance_meters", "created_at"]
    readonly_fields = fields
    can_delete = False
    show_change_link = True


@admin.register(Cpop)
class CpopAdmin(ModelAdmin):  # type: ignore[misc]
    """Admin for cPOP drops."""

    list_display = ["event_name", "organizer_name", "start_date", "end_date", "amount", "claim_count", "created_at"]
    list_filter = ["token_type", "start_date", "created_at"]
    search_fields = ["event_name", "organizer_name", "location", "creator_address", "token_address", "token_id"]
    readonly_fields = ["created_at", "updated_at"]
    ordering = ["-created_at"]
    inlines = [ClaimInline]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Cpop]:
        return super().get_queryset(request).with_claim_count()  # type: ignore[no-any-return]

    @admin.display(description="Claims", ordering="claim_count")
    def claim_count(self, obj: Cpop) -> int:
        """Number of claims recorded for this cPOP."""
        return obj.claim_count  # type: ignore[attr-defined,no-any-return]


@admin.register(Claim)
class ClaimAdmin(ModelAdmin):  # type: ignore[misc]
    """Admin for claims."""

    list_display = ["wallet_short", "cpop", "status", "distance_meters", "created_at"]
    list_filter = ["status", "created_at"]
    search_fields = ["wallet_address", "signature", "cpop__event_name"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["cpop"]
    ordering = ["-created_at"]

    @admin.display(description="Wallet")
    def wallet_short(self, obj: Claim) -> str:
        """Show truncated wallet address."""
        return f"{obj.wallet_address[:8]}...{obj.wallet_address[-4:]}"
