import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.exceptions import ResourceNotFound
from apps.core.permissions import IsAgent, IsClient, IsInspector
from .serializers import InspectionSerializer, CreateInspectionSerializer, CompleteInspectionSerializer, EarningSerializer
from .services import InspectionService

logger = logging.getLogger(__name__)


class InspectionViewSet(viewsets.GenericViewSet):
    """
    Inspection lifecycle:
    - clients schedule inspections of ACTIVE listings
    - every role reads the inspections it is party to
    - inspectors browse unassigned jobs, accept, start and complete them
    - clients, the listing agent or a platform admin may cancel
    """

    serializer_class = InspectionSerializer
    lookup_value_regex = "[0-9a-f-]{36}"

    failure_messages = {
        "list": "Failed to fetch inspections",
        "create": "Failed to schedule inspection",
        "retrieve": "Failed to fetch inspection",
        "available_jobs": "Failed to fetch available jobs",
        "accept": "Failed to accept inspection job",
        "start": "Failed to start inspection",
        "complete": "Failed to complete inspection",
        "cancel": "Failed to cancel inspection",
    }

    inspector_only = {
        "available_jobs": "Only inspectors can view available jobs",
        "accept": "Only inspectors can accept inspection jobs",
        "start": "Only inspectors can start inspections",
        "complete": "Only inspectors can complete inspections",
    }

    def get_permissions(self):
        if self.action == "create":
            return [IsClient()]
        if self.action in self.inspector_only:
            return [IsInspector(self.inspector_only[self.action])]
        return [IsAuthenticated()]

    def get_queryset(self):
        return InspectionService.list_for_user(self.request.user)

    def list(self, request):
        params = request.query_params
        inspections = InspectionService.list_for_user(
            request.user,
            status=params.get("status"),
            type=params.get("type"),
            upcoming=params.get("upcoming") == "true",
        )
        return Response({"success": True, "inspections": InspectionSerializer(inspections, many=True).data})

    def retrieve(self, request, pk=None):
        inspection = InspectionService.get_inspection(pk)
        # hide inspections the caller is not party to
        if not self.get_queryset().filter(pk=inspection.pk).exists():
            raise ResourceNotFound("Inspection not found")
        return Response({"success": True, "inspection": InspectionSerializer(inspection).data})

    def create(self, request):
        serializer = CreateInspectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        inspection = InspectionService.create_inspection(
            client=request.user,
            property_id=data["propertyId"],
            type=data["type"],
            scheduled_at=data["scheduledAt"],
            notes=data["notes"],
        )

        return Response(
            {
                "success": True,
                "message": "Inspection scheduled successfully",
                "inspection": InspectionSerializer(inspection).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"], url_path="available-jobs")
    def available_jobs(self, request):
        params = request.query_params
        jobs = InspectionService.available_jobs(
            type=params.get("type"),
            location=params.get("location"),
            urgency=params.get("urgency"),
        )
        return Response({"success": True, "availableJobs": [job.as_dict() for job in jobs]})

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):
        inspection = InspectionService.accept(pk, request.user)
        return Response(
            {
                "success": True,
                "message": "Inspection job accepted successfully",
                "inspection": InspectionSerializer(inspection).data,
            }
        )

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        inspection = InspectionService.start(pk, request.user)
        return Response(
            {
                "success": True,
                "message": "Inspection started",
                "inspection": InspectionSerializer(inspection).data,
            }
        )

    @action(detail=True, methods=["put"])
    def complete(self, request, pk=None):
        serializer = CompleteInspectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        inspection, earning = InspectionService.complete(
            pk,
            request.user,
            recording_url=serializer.validated_data.get("recordingUrl"),
            notes=serializer.validated_data.get("notes"),
        )
        return Response(
            {
                "success": True,
                "message": "Inspection completed successfully",
                "inspection": InspectionSerializer(inspection).data,
                "earning": EarningSerializer(earning).data,
            }
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        inspection = InspectionService.cancel(pk, request.user)
        return Response(
            {
                "success": True,
                "message": "Inspection cancelled",
                "inspection": InspectionSerializer(inspection).data,
            }
        )


@api_view(["GET"])
@permission_classes([IsAgent])
def agent_earnings(request):
    """Earnings booked to the calling agent, newest first, with totals"""
    earnings, totals = InspectionService.earnings_for(request.user)
    return Response(
        {
            "success": True,
            "earnings": EarningSerializer(earnings, many=True).data,
            "totals": totals,
        }
    )
