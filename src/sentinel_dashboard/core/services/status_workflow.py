from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..domain.enums import VulnerabilityStatus
from ..domain.models import StatusChange, Vulnerability

logger = logging.getLogger(__name__)


def apply_status_change(v: Vulnerability, target: VulnerabilityStatus, now: datetime) -> Vulnerability:
    """Return the record moved to `target`, appending one history entry.

    Setting the status the record already has returns the very same record.
    Any status may follow any other; there is no forward-only guard.
    """
    if v.status is target:
        logger.debug(f"{v.id} already {target.value}; no history entry added")
        return v

    last = v.status_history[-1].timestamp
    # history must stay chronological even if the wall clock stepped back
    stamp = now if now >= last else last
    logger.info(f"{v.id}: {v.status.value} -> {target.value}")
    return v.with_updates(
        status=target,
        status_history=v.status_history + (StatusChange(target, stamp),),
    )


def reassign(v: Vulnerability, assignee: Optional[str]) -> Vulnerability:
    """Return the record with a new assignee; blank or None clears it.

    Names are not checked against any team list.
    """
    normalized = assignee.strip() if assignee else None
    normalized = normalized or None
    if normalized == v.assignee:
        return v
    logger.info(f"{v.id}: assignee {v.assignee or '-'} -> {normalized or '-'}")
    return v.with_updates(assignee=normalized)
