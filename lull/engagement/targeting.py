"""Choosing the channel a proactive message goes to."""

import logging
from typing import Optional

from lull.core.interfaces import IChannel, ICommunityHandle

logger = logging.getLogger(__name__)


def select_target_channel(community: ICommunityHandle) -> Optional[IChannel]:
    """
    Configured primary channel, else the first sendable channel by position.
    """
    channels = community.text_channels()

    primary_id = community.primary_channel_id
    if primary_id:
        primary = next((c for c in channels if c.id == str(primary_id)), None)
        if primary is not None and primary.can_send():
            logger.debug(f"Using primary channel #{primary.name} in {community.name}")
            return primary
        logger.warning(
            f"Configured primary channel {primary_id} unavailable in {community.name}"
        )

    sendable = sorted((c for c in channels if c.can_send()), key=lambda c: c.position)
    if sendable:
        logger.debug(f"Using default channel #{sendable[0].name} in {community.name}")
        return sendable[0]

    logger.warning(f"No suitable channel found in {community.name}")
    return None
