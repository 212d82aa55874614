from typing import Any

from fastapi import HTTPException, status

from worship.core.limits import LimitCheckResult, UpgradeInfo


class NotFoundError(HTTPException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class ForbiddenError(HTTPException):
    """Raised when user lacks permission to access a resource."""

    def __init__(self, message: str = "Not authorized to access this resource"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=message,
        )


class AccessDeniedError(HTTPException):
    """Raised when the authorization gate denies a request.

    The detail carries a machine-readable code and, for browser flows,
    the path the client should redirect to.
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        redirect: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        detail: dict[str, Any] = {"code": code, "message": message}
        if redirect:
            detail["redirect"] = redirect
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class LimitExceededError(HTTPException):
    """Raised when creating a resource would exceed the plan quota (402)."""

    def __init__(self, result: LimitCheckResult, upgrade: UpgradeInfo):
        super().__init__(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "code": "LIMIT_REACHED",
                "message": result.message,
                "current": result.current,
                "limit": result.limit,
                "tier": result.tier.value,
                "upgrade": upgrade.to_dict(),
            },
        )


class AuthProviderUnavailableError(AccessDeniedError):
    """Raised when the identity provider cannot be reached (503)."""

    def __init__(self, message: str = "Authentication service unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code="AUTH_PROVIDER_ERROR",
            message=message,
        )
