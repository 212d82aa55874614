import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from worship.api.deps import WorshipAuth, WorshipAuthContext, enforce_limit
from worship.config.plans import Resource
from worship.core.database import get_db
from worship.core.exceptions import NotFoundError
from worship.core.permissions import Permission
from worship.domain.church_operations import church_ops
from worship.models.church import ChurchCreate, ChurchRead, MinistryCreate, MinistryRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/worship", tags=["worship-churches"])


@router.post("/churches", response_model=ChurchRead, status_code=status.HTTP_201_CREATED)
async def create_church(
    data: ChurchCreate,
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_CREATE_CHURCH)),
    db: AsyncSession = Depends(get_db),
):
    """Create a church. Requires permission and a free church slot on the plan."""
    await enforce_limit(db, auth.organization_id, Resource.CHURCHES)

    church = await church_ops.create_church(db, auth.organization_id, data)
    logger.info(f"Church {church.id} created in org {auth.organization_id} by {auth.user_id}")
    return church


@router.post("/ministries", response_model=MinistryRead, status_code=status.HTTP_201_CREATED)
async def create_ministry(
    data: MinistryCreate,
    auth: WorshipAuthContext = Depends(WorshipAuth(Permission.CAN_CREATE_MINISTRY)),
    db: AsyncSession = Depends(get_db),
):
    """Create a ministry in one of the organization's churches."""
    church = await church_ops.get_church(db, auth.organization_id, data.church_id)
    if not church:
        raise NotFoundError("Church")

    await enforce_limit(db, auth.organization_id, Resource.MINISTRIES)

    ministry = await church_ops.create_ministry(db, data)
    logger.info(f"Ministry {ministry.id} created in church {church.id} by {auth.user_id}")
    return ministry
