from worship.domain.church_operations import church_ops
from worship.domain.org_member_operations import org_member_ops
from worship.domain.role_assignment_operations import role_assignment_ops
from worship.domain.subscription_operations import subscription_ops
from worship.domain.usage_operations import usage_ops

__all__ = [
    "church_ops",
    "org_member_ops",
    "role_assignment_ops",
    "subscription_ops",
    "usage_ops",
]
