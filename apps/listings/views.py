import logging
import uuid
from decimal import Decimal, InvalidOperation

from django.db.models import Q
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.authentication.models import User
from apps.core.exceptions import AuthorizationDenied, ResourceNotFound, ValidationFailed
from apps.core.permissions import IsClient, IsListingManager
from apps.notifications.services import get_notification_service
from .models import Listing, SavedListing
from .serializers import ListingSerializer, ListingWriteSerializer, SavedListingSerializer

logger = logging.getLogger(__name__)


def _parse_price(value, name):
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValidationFailed(f"{name} must be a number")


def _get_listing(pk):
    try:
        listing = Listing.objects.select_related("agent").filter(pk=uuid.UUID(pk)).first()
    except ValueError:
        listing = None
    if listing is None:
        raise ResourceNotFound("Listing not found")
    return listing


class ListingViewSet(viewsets.ModelViewSet):
    """
    Property listings

    - list / retrieve are public, filterable by type, status, location and price
    - agents (and company / platform admins) create listings they own
    - only the owning agent or a platform admin may update or delete
    - clients save and unsave listings; the agent hears about each save
    """

    lookup_value_regex = "[0-9a-f-]{36}"
    failure_messages = {
        "list": "Failed to fetch listings",
        "create": "Failed to create listing",
        "partial_update": "Failed to update listing",
        "update": "Failed to update listing",
        "destroy": "Failed to delete listing",
        "save_listing": "Failed to save property",
        "unsave_listing": "Failed to unsave property",
    }

    client_only = {
        "save_listing": "Only clients can save properties",
        "unsave_listing": "Only clients can unsave properties",
    }

    def get_permissions(self):
        if self.action in ["list", "retrieve"]:
            return [AllowAny()]
        if self.action in self.client_only:
            return [IsClient(self.client_only[self.action])]
        return [IsListingManager()]

    def get_serializer_class(self):
        if self.action in ["create", "update", "partial_update"]:
            return ListingWriteSerializer
        return ListingSerializer

    def get_queryset(self):
        queryset = Listing.objects.select_related("agent", "company")
        if self.action != "list":
            return queryset

        params = self.request.query_params
        if params.get("type"):
            queryset = queryset.filter(type=params["type"])
        if params.get("status"):
            queryset = queryset.filter(status=params["status"])

        location = params.get("location")
        if location:
            queryset = queryset.filter(Q(address__icontains=location) | Q(city__icontains=location) | Q(state__icontains=location))

        if params.get("minPrice"):
            queryset = queryset.filter(price__gte=_parse_price(params["minPrice"], "minPrice"))
        if params.get("maxPrice"):
            queryset = queryset.filter(price__lte=_parse_price(params["maxPrice"], "maxPrice"))

        return queryset.order_by("-created_at")

    def check_object_permissions(self, request, obj):
        super().check_object_permissions(request, obj)
        if self.action in ["update", "partial_update", "destroy"]:
            if obj.agent_id != request.user.id and request.user.role != "PLATFORM_ADMIN":
                raise AuthorizationDenied("You can only modify your own listings")

    def list(self, request, *args, **kwargs):
        listings = self.get_queryset()
        return Response({"success": True, "listings": ListingSerializer(listings, many=True).data})

    def retrieve(self, request, *args, **kwargs):
        return Response({"success": True, "listing": ListingSerializer(self.get_object()).data})

    def create(self, request, *args, **kwargs):
        serializer = ListingWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        listing = serializer.save(agent=request.user, status=Listing.ACTIVE)

        logger.info(f"Listing {listing.id} created by {request.user.email}")
        return Response({"success": True, "listing": ListingSerializer(listing).data}, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        listing = self.get_object()
        serializer = ListingWriteSerializer(listing, data=request.data, partial=kwargs.get("partial", False))
        serializer.is_valid(raise_exception=True)
        listing = serializer.save()

        logger.info(f"Listing {listing.id} updated by {request.user.email}")
        return Response({"success": True, "listing": ListingSerializer(listing).data})

    def destroy(self, request, *args, **kwargs):
        listing = self.get_object()
        listing_id = listing.id
        listing.delete()

        logger.info(f"Listing {listing_id} deleted by {request.user.email}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="save")
    def save_listing(self, request, pk=None):
        listing = _get_listing(pk)
        saved, created = SavedListing.objects.get_or_create(
            user=request.user,
            listing=listing,
            defaults={"notes": request.data.get("notes") or ""},
        )
        if not created:
            raise ValidationFailed("Property already saved")

        logger.info(f"Listing {listing.id} saved by {request.user.email}")

        result = get_notification_service().notify_listing_saved(listing.agent, listing, request.user)
        if not result.ok:
            logger.warning(f"Notification (listing saved) failed: {result.error}")

        return Response(
            {
                "success": True,
                "message": "Property saved successfully",
                "savedListing": SavedListingSerializer(saved).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @save_listing.mapping.delete
    def unsave_listing(self, request, pk=None):
        saved = SavedListing.objects.filter(user=request.user, listing=_get_listing(pk)).first()
        if saved is None:
            raise ResourceNotFound("Saved listing not found")
        saved.delete()

        logger.info(f"Listing {pk} unsaved by {request.user.email}")
        return Response({"success": True, "message": "Property unsaved successfully"})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def saved_properties(request, client_id):
    """A client's saved listings; visible to that client and platform admins"""
    if request.user.id != client_id and request.user.role != User.PLATFORM_ADMIN:
        raise AuthorizationDenied("You are not authorized to view these saved listings")
    if not User.objects.filter(pk=client_id, role=User.CLIENT).exists():
        raise ResourceNotFound("Client not found")

    saved = SavedListing.objects.filter(user_id=client_id).select_related("listing__agent", "listing__company")
    return Response({"success": True, "savedListings": SavedListingSerializer(saved, many=True).data})
