import logging
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone
from django.utils.crypto import get_random_string

from apps.authentication.models import User, InspectorProfile
from apps.core.exceptions import AuthorizationDenied, ResourceNotFound, ResourceStateConflict, ValidationFailed
from apps.inspections.models import Inspection, InspectionClient, Earning
from apps.listings.models import Listing
from apps.notifications.services import get_notification_service
from .available_jobs import AvailableJob, project_available_job

logger = logging.getLogger(__name__)

MEETING_CODE_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"


def _parse_uuid(value):
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _report(result, context: str):
    """Log a failed notification result; notification failures never fail the request"""
    if not result.ok:
        logger.warning(f"Notification ({context}) failed: {result.error}")


class InspectionService:
    """
    Service layer for the inspection lifecycle
    Handles scheduling, role-scoped reads, the inspector job pool, and state transitions

    State changes are committed before any notification is attempted, so a
    notification or email failure can never roll back an inspection.
    """

    @staticmethod
    def detail_queryset():
        return Inspection.objects.select_related("listing__agent", "listing__company", "inspector").prefetch_related(
            "clients__client"
        )

    @staticmethod
    def get_inspection(inspection_id) -> Inspection:
        pk = _parse_uuid(inspection_id)
        if pk is None:
            raise ResourceNotFound("Inspection not found")
        try:
            return InspectionService.detail_queryset().get(pk=pk)
        except Inspection.DoesNotExist:
            raise ResourceNotFound("Inspection not found")

    @staticmethod
    def create_inspection(client, property_id, type: str, scheduled_at: datetime, notes: str = "", notifier=None) -> Inspection:
        """
        Schedule an inspection of an ACTIVE listing for a client

        Args:
            client: Requesting user (role CLIENT, checked by the view)
            property_id: Listing id
            type: VIRTUAL or PHYSICAL
            scheduled_at: Future timestamp (validated by the serializer)
            notes: Optional notes stored on the client registration
            notifier: NotificationService; defaults to the configured one

        Returns:
            Created Inspection, reloaded with listing, agent and clients

        Raises:
            ResourceNotFound: If the listing does not exist
            ResourceStateConflict: If the listing is not ACTIVE
        """
        listing_pk = _parse_uuid(property_id)
        listing = Listing.objects.select_related("agent").filter(pk=listing_pk).first() if listing_pk else None
        if listing is None:
            raise ResourceNotFound("Property not found")

        if not listing.is_active:
            raise ResourceStateConflict("Property is not available for inspection")

        with transaction.atomic():
            inspection = Inspection.objects.create(
                type=type,
                scheduled_at=scheduled_at,
                duration=settings.INSPECTION_DURATIONS[type],
                fee=settings.INSPECTION_FEES[type],
                paid=False,
                listing=listing,
                company_id=listing.company_id,
                inspector=None,
            )
            InspectionClient.objects.create(inspection=inspection, client=client, interested=True, notes=notes or "")

        logger.info(f"Inspection {inspection.id} scheduled by {client.email} for listing {listing.id}")

        inspection = InspectionService.get_inspection(inspection.id)
        InspectionService._announce_scheduled(inspection, client, notifier or get_notification_service())
        return inspection

    @staticmethod
    def _announce_scheduled(inspection, client, notifier):
        _report(notifier.notify_inspection_scheduled(client, inspection), "inspection scheduled")
        _report(notifier.notify_new_inspection_request(inspection.listing.agent, inspection), "new inspection request")

        # every verified inspector on the platform, no location filter
        inspector_ids = User.objects.filter(
            role=User.INSPECTOR, verification_status=User.VERIFIED, is_active=True
        ).values_list("id", flat=True)
        _report(notifier.notify_new_job_available(inspector_ids, inspection), "new job available")

    @staticmethod
    def list_for_user(user, status: str = None, type: str = None, upcoming: bool = False):
        """Inspections visible to `user`, newest scheduled first"""
        queryset = InspectionService.detail_queryset()

        if user.role == User.CLIENT:
            queryset = queryset.filter(clients__client=user)
        elif user.role == User.INSPECTOR:
            queryset = queryset.filter(inspector=user)
        elif user.role in (User.AGENT, User.COMPANY_ADMIN):
            # company admins are scoped by agent too, not by company
            queryset = queryset.filter(listing__agent=user)
        elif user.role != User.PLATFORM_ADMIN:
            return queryset.none()

        if status:
            queryset = queryset.filter(status=status)
        if type:
            queryset = queryset.filter(type=type)
        if upcoming:
            queryset = queryset.filter(scheduled_at__gte=timezone.now())

        return queryset.distinct().order_by("-scheduled_at")

    @staticmethod
    def available_jobs(type: str = None, location: str = None, urgency: str = None, now: datetime = None) -> list[AvailableJob]:
        """
        Unassigned, scheduled, future inspections as job views

        Urgency is derived per row, so it is applied after the query.
        """
        now = now or timezone.now()
        queryset = (
            Inspection.objects.filter(status=Inspection.SCHEDULED, inspector__isnull=True, scheduled_at__gte=now)
            .select_related("listing__agent")
            .prefetch_related("clients__client")
        )

        if type:
            queryset = queryset.filter(type=type)
        if location:
            queryset = queryset.filter(
                Q(listing__city__icontains=location)
                | Q(listing__state__icontains=location)
                | Q(listing__address__icontains=location)
            )

        jobs = [project_available_job(inspection, now) for inspection in queryset.order_by("scheduled_at", "created_at")]
        if urgency:
            jobs = [job for job in jobs if job.urgency == urgency]
        return jobs

    @staticmethod
    def _check_acceptable(inspection, now):
        if inspection.inspector_id is not None:
            raise ResourceStateConflict("This inspection is already assigned to another inspector")
        if inspection.status != Inspection.SCHEDULED:
            raise ResourceStateConflict("Only scheduled inspections can be accepted")
        if inspection.scheduled_at <= now:
            raise ResourceStateConflict("Cannot accept past inspections")

    @staticmethod
    def accept(inspection_id, inspector, notifier=None) -> Inspection:
        """
        Assign an available inspection to `inspector`

        The assignment is a single conditional UPDATE, so of two inspectors
        accepting the same job concurrently exactly one succeeds.

        Raises:
            ResourceNotFound: If the inspection does not exist
            ValidationFailed: If the caller has no inspector profile
            ResourceStateConflict: If the job is taken, not SCHEDULED, or in the past
        """
        inspection = InspectionService.get_inspection(inspection_id)
        now = timezone.now()
        InspectionService._check_acceptable(inspection, now)

        if not InspectorProfile.objects.filter(user=inspector).exists():
            raise ValidationFailed("Inspector profile not found")

        meeting_url = None
        if inspection.type == Inspection.VIRTUAL:
            meeting_url = f"{settings.MEETING_URL_BASE}/{get_random_string(12, MEETING_CODE_CHARS)}"

        assigned = Inspection.objects.filter(
            pk=inspection.pk,
            inspector__isnull=True,
            status=Inspection.SCHEDULED,
            scheduled_at__gt=now,
        ).update(inspector=inspector, meeting_url=meeting_url, updated_at=now)

        if not assigned:
            # lost a race; report what changed underneath us
            inspection.refresh_from_db()
            InspectionService._check_acceptable(inspection, now)
            raise ResourceStateConflict("This inspection is already assigned to another inspector")

        logger.info(f"Inspection {inspection.id} accepted by {inspector.email}")

        inspection = InspectionService.get_inspection(inspection.pk)
        notifier = notifier or get_notification_service()
        for registration in inspection.clients.all():
            _report(notifier.notify_inspection_accepted(registration.client, inspection), "inspection accepted")
        _report(notifier.notify_inspection_accepted(inspection.listing.agent, inspection, email=False), "inspection accepted")
        return inspection

    @staticmethod
    def start(inspection_id, inspector) -> Inspection:
        pk = _parse_uuid(inspection_id)
        with transaction.atomic():
            inspection = Inspection.objects.select_for_update().filter(pk=pk).first() if pk else None
            if inspection is None:
                raise ResourceNotFound("Inspection not found")
            if inspection.inspector_id != inspector.id:
                raise ValidationFailed("You are not assigned to this inspection")
            if inspection.status != Inspection.SCHEDULED:
                raise ResourceStateConflict("Only scheduled inspections can be started")

            inspection.status = Inspection.IN_PROGRESS
            inspection.save(update_fields=["status", "updated_at"])

        logger.info(f"Inspection {inspection.id} started by {inspector.email}")
        return InspectionService.get_inspection(inspection.pk)

    @staticmethod
    def complete(inspection_id, inspector, recording_url: str = None, notes: str = None, notifier=None):
        """
        Close out an inspection and book its earnings

        Args:
            inspection_id: Inspection to complete
            inspector: Assigned inspector
            recording_url: Optional recording of a virtual inspection
            notes: Optional completion notes

        Returns:
            (inspection, inspector Earning)

        Raises:
            ResourceNotFound: If the inspection does not exist
            ValidationFailed: If the caller is not assigned, or it is too early
            ResourceStateConflict: If already COMPLETED or CANCELLED
        """
        pk = _parse_uuid(inspection_id)
        with transaction.atomic():
            # lock only the inspection row; listing is read lazily
            inspection = Inspection.objects.select_for_update().filter(pk=pk).first() if pk else None
            if inspection is None:
                raise ResourceNotFound("Inspection not found")
            if inspection.inspector_id != inspector.id:
                raise ValidationFailed("You are not assigned to this inspection")
            if inspection.status == Inspection.COMPLETED:
                raise ResourceStateConflict("This inspection is already completed")
            if inspection.status == Inspection.CANCELLED:
                raise ResourceStateConflict("Cancelled inspections cannot be completed")

            early = timedelta(minutes=settings.INSPECTION_EARLY_COMPLETION_MINUTES)
            if timezone.now() < inspection.scheduled_at - early:
                raise ValidationFailed(
                    f"Cannot complete inspection more than {settings.INSPECTION_EARLY_COMPLETION_MINUTES} "
                    f"minutes before scheduled time"
                )

            inspection.status = Inspection.COMPLETED
            inspection.recording_url = recording_url or None
            inspection.completion_notes = notes or None
            inspection.save(update_fields=["status", "recording_url", "completion_notes", "updated_at"])

            split = settings.INSPECTION_EARNING_SPLIT
            fee = Decimal(inspection.fee or 0)
            platform_cut = Decimal(split["PLATFORM"])
            cents = Decimal("0.01")

            earning = Earning.objects.create(
                amount=(fee * Decimal(split["INSPECTOR"])).quantize(cents),
                user=inspector,
                company_id=inspection.company_id,
                inspection=inspection,
                platform_cut=platform_cut,
            )
            Earning.objects.create(
                amount=(fee * Decimal(split["AGENT"])).quantize(cents),
                user_id=inspection.listing.agent_id,
                company_id=inspection.company_id,
                inspection=inspection,
                platform_cut=platform_cut,
            )

            InspectorProfile.objects.filter(user=inspector).update(inspection_count=F("inspection_count") + 1)

        logger.info(f"Inspection {inspection.id} completed by {inspector.email}; earning {earning.amount} {earning.currency}")

        inspection = InspectionService.get_inspection(inspection.pk)
        notifier = notifier or get_notification_service()
        for registration in inspection.clients.all():
            _report(notifier.notify_inspection_completed(registration.client, inspection), "inspection completed")
        _report(notifier.notify_inspection_completed(inspection.listing.agent, inspection, email=False), "inspection completed")
        return inspection, earning

    @staticmethod
    def cancel(inspection_id, user) -> Inspection:
        pk = _parse_uuid(inspection_id)
        with transaction.atomic():
            inspection = Inspection.objects.select_for_update().filter(pk=pk).first() if pk else None
            if inspection is None:
                raise ResourceNotFound("Inspection not found")

            allowed = (
                user.role == User.PLATFORM_ADMIN
                or inspection.listing.agent_id == user.id
                or inspection.clients.filter(client=user).exists()
            )
            if not allowed:
                raise AuthorizationDenied("You cannot cancel this inspection")
            if inspection.status == Inspection.COMPLETED:
                raise ResourceStateConflict("Completed inspections cannot be cancelled")
            if inspection.status == Inspection.CANCELLED:
                raise ResourceStateConflict("This inspection is already cancelled")

            inspection.status = Inspection.CANCELLED
            inspection.save(update_fields=["status", "updated_at"])

        logger.info(f"Inspection {inspection.id} cancelled by {user.email}")
        return InspectionService.get_inspection(inspection.pk)

    @staticmethod
    def earnings_for(user):
        """
        A user's earnings, newest first, with paid / pending totals

        Returns:
            (earnings queryset, totals dict of 2dp strings and a count)
        """
        earnings = Earning.objects.filter(user=user).order_by("-created_at")
        sums = earnings.aggregate(
            total=Sum("amount"),
            paid_total=Sum("amount", filter=Q(paid=True)),
            pending_total=Sum("amount", filter=Q(paid=False)),
            count=Count("id"),
        )
        zero = Decimal("0")
        totals = {
            "total": f"{sums['total'] or zero:.2f}",
            "paid": f"{sums['paid_total'] or zero:.2f}",
            "pending": f"{sums['pending_total'] or zero:.2f}",
            "count": sums["count"],
        }
        return earnings, totals
