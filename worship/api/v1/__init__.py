from worship.api.v1 import churches, roles, subscription

__all__ = [
    "churches",
    "roles",
    "subscription",
]
