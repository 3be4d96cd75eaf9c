from rest_framework.permissions import BasePermission


class RolePermission(BasePermission):
    """Allow authenticated users whose role is one of `roles`"""

    roles: tuple = ()
    message = "You do not have permission to perform this action"

    def __init__(self, message: str = None):
        # per-action wording for the 403 body
        if message:
            self.message = message

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "role", None) in self.roles)


class IsClient(RolePermission):
    roles = ("CLIENT",)
    message = "Only clients can schedule inspections"


class IsInspector(RolePermission):
    roles = ("INSPECTOR",)
    message = "Only inspectors can perform this action"


class IsListingManager(RolePermission):
    roles = ("AGENT", "COMPANY_ADMIN", "PLATFORM_ADMIN")
    message = "Only agents can manage property listings"


class IsPlatformAdmin(RolePermission):
    roles = ("PLATFORM_ADMIN",)
    message = "Insufficient permissions"


class IsAgent(RolePermission):
    roles = ("AGENT", "PLATFORM_ADMIN")
    message = "Only agents can view their earnings"
