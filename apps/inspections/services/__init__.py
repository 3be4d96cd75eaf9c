from .available_jobs import AvailableJob, compute_urgency, project_available_job, URGENCY_LEVELS
from .inspection_service import InspectionService

__all__ = [
    "AvailableJob",
    "InspectionService",
    "URGENCY_LEVELS",
    "compute_urgency",
    "project_available_job",
]
