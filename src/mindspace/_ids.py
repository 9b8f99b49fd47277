"""Entity id generation.

Ids keep the millisecond creation timestamp as a prefix so they sort in
creation order, followed by random hex so two entities created within
the same millisecond never collide.
"""

from __future__ import annotations

import secrets
import time

_SUFFIX_BYTES = 6


def new_id() -> str:
    """Return a new time-ordered entity id, e.g. ``"1718000000000-9f2c01ab44e0"``."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(_SUFFIX_BYTES)}"
