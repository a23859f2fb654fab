"""Broadcast channel authorization endpoint."""

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.exceptions import ForbiddenException
from app.models import User
from app.schemas.auth import ChannelAuthRequest
from app.schemas.common import APIResponse
from app.utils.channels import authorize_channel

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth", response_model=APIResponse[dict])
async def channel_auth(
    body: ChannelAuthRequest,
    current_user: User = Depends(get_current_user),
):
    """Check whether the current user may subscribe to a channel."""
    if not authorize_channel(current_user, body.channel_name):
        logger.warning(f"User {current_user.id} denied channel {body.channel_name}")
        raise ForbiddenException("You are not allowed to subscribe to this channel")

    return APIResponse(data={"channel_name": body.channel_name, "authorized": True})
