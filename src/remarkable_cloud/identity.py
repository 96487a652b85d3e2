from __future__ import annotations

import uuid

# Fixed namespace so the same host always yields the same device id
DEVICE_NAMESPACE = uuid.NAMESPACE_URL


def new_id() -> str:
    return str(uuid.uuid4())


def device_id() -> str:
    """Stable identifier derived from the host's hardware address.

    Not a secret: it only disambiguates registration requests coming from
    the same machine.
    """
    return str(uuid.uuid5(DEVICE_NAMESPACE, f"{uuid.getnode():012x}"))
