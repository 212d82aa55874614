from worship.models.church import (
    Church,
    ChurchCreate,
    ChurchRead,
    Ministry,
    MinistryCreate,
    MinistryRead,
    Service,
)
from worship.models.organization import NativeOrgRole, Organization, OrganizationMember
from worship.models.subscription import Subscription, SubscriptionStatus
from worship.models.worship_role import (
    BulkRoleAssignment,
    BulkRoleAssignRequest,
    ChurchAssignmentUpdate,
    RoleAssignRequest,
    WorshipRoleAssignment,
)

__all__ = [
    "Organization",
    "OrganizationMember",
    "NativeOrgRole",
    "Subscription",
    "SubscriptionStatus",
    "Church",
    "ChurchCreate",
    "ChurchRead",
    "Ministry",
    "MinistryCreate",
    "MinistryRead",
    "Service",
    "WorshipRoleAssignment",
    "RoleAssignRequest",
    "BulkRoleAssignment",
    "BulkRoleAssignRequest",
    "ChurchAssignmentUpdate",
]
