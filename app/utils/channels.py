"""Broadcast channel authorization."""

import re

from app.models import User

PRIVATE_PREFIXES = ("private-", "presence-")

_USER_CHANNEL = re.compile(r"^(?:user|App\.Models\.User)\.(?P<id>[0-9a-fA-F-]+)$")


def authorize_channel(user: User, channel_name: str) -> bool:
    """Check whether ``user`` may subscribe to ``channel_name``.

    Per-account channels are open only to their owner; ``notifications`` is
    open to any authenticated account.
    """
    name = channel_name
    for prefix in PRIVATE_PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix):]
            break

    if name == "notifications":
        return True

    match = _USER_CHANNEL.match(name)
    if match:
        return match.group("id").lower() == str(user.id).lower()

    return False
