from django.contrib import admin
from .models import Inspection, InspectionClient, Earning


class InspectionClientInline(admin.TabularInline):
    model = InspectionClient
    extra = 0
    readonly_fields = ["client", "interested", "notes", "created_at"]


@admin.register(Inspection)
class InspectionAdmin(admin.ModelAdmin):
    list_display = ["listing", "type", "status", "scheduled_at", "inspector", "fee", "paid"]
    list_filter = ["status", "type", "paid"]
    search_fields = ["listing__title", "listing__city", "listing__state"]
    readonly_fields = ["id", "created_at", "updated_at"]
    inlines = [InspectionClientInline]


@admin.register(Earning)
class EarningAdmin(admin.ModelAdmin):
    list_display = ["user", "inspection", "amount", "currency", "paid", "created_at"]
    list_filter = ["paid", "type"]
    readonly_fields = ["id", "created_at"]
