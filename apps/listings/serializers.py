from rest_framework import serializers
from apps.authentication.serializers import UserSummarySerializer
from .models import Listing, Company, SavedListing


class ListingSerializer(serializers.ModelSerializer):
    """Listing with its agent, as embedded in inspection responses"""

    agentId = serializers.UUIDField(source="agent_id", read_only=True)
    companyId = serializers.UUIDField(source="company_id", read_only=True, allow_null=True)
    agent = UserSummarySerializer(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Listing
        fields = [
            "id",
            "title",
            "description",
            "type",
            "price",
            "address",
            "city",
            "state",
            "bedrooms",
            "bathrooms",
            "area",
            "status",
            "images",
            "agentId",
            "companyId",
            "agent",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class ListingWriteSerializer(serializers.ModelSerializer):
    """Create / update a listing; the agent always comes from the request user"""

    companyId = serializers.PrimaryKeyRelatedField(
        source="company",
        queryset=Company.objects.all(),
        required=False,
        allow_null=True,
    )
    images = serializers.ListField(child=serializers.URLField(max_length=1000), required=False)

    class Meta:
        model = Listing
        fields = [
            "title",
            "description",
            "type",
            "price",
            "address",
            "city",
            "state",
            "bedrooms",
            "bathrooms",
            "area",
            "status",
            "images",
            "companyId",
        ]
        extra_kwargs = {"status": {"required": False}}

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be greater than 0")
        return value


class SavedListingSerializer(serializers.ModelSerializer):
    userId = serializers.UUIDField(source="user_id", read_only=True)
    listingId = serializers.UUIDField(source="listing_id", read_only=True)
    listing = ListingSerializer(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = SavedListing
        fields = ["id", "userId", "listingId", "notes", "listing", "createdAt"]
        read_only_fields = fields
