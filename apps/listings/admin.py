from django.contrib import admin
from .models import Company, Listing, SavedListing


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ["name", "created_at"]
    search_fields = ["name"]


@admin.register(Listing)
class ListingAdmin(admin.ModelAdmin):
    list_display = ["title", "city", "state", "status", "agent", "created_at"]
    list_filter = ["status", "type"]
    search_fields = ["title", "address", "city", "state"]
    readonly_fields = ["id", "created_at", "updated_at"]


@admin.register(SavedListing)
class SavedListingAdmin(admin.ModelAdmin):
    list_display = ["listing", "user", "created_at"]
    search_fields = ["listing__title", "user__email"]
    readonly_fields = ["id", "created_at"]
