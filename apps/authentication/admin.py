from django.contrib import admin
from .models import User, InspectorProfile


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ["email", "role", "verification_status", "is_active", "date_joined"]
    list_filter = ["role", "verification_status"]
    search_fields = ["email", "first_name", "last_name"]
    readonly_fields = ["id", "date_joined", "last_login"]


@admin.register(InspectorProfile)
class InspectorProfileAdmin(admin.ModelAdmin):
    list_display = ["user", "service_area", "inspection_count"]
    search_fields = ["user__email", "service_area"]
