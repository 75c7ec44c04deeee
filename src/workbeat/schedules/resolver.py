"""Fold the loosely-typed schedule blobs stored on employees into WorkSchedule.

Accepted shapes:

- ``{"start": "09:00"}``
- ``{"days": [...], "hours": {"start": "09:00"}}``
- ``{"monday": {"start": "08:30"}, "friday": {"start": "10:00"}, ...}``
- any of the above serialized as a JSON string
- ``None`` / empty

Anything else resolves to ``None`` (never late) and is logged.
"""

from __future__ import annotations

import json
import logging
from datetime import time
from typing import Any, Dict, Optional

from ..common.datetime_utils import parse_hhmm
from .model import WEEKDAY_NAMES, WorkSchedule

logger = logging.getLogger(__name__)


def _start_of(block: Any) -> Optional[time]:
    if isinstance(block, dict):
        return parse_hhmm(block.get("start"))
    return None


def resolve_schedule(raw: Any) -> Optional[WorkSchedule]:
    if raw is None or raw == "" or raw == {}:
        return None

    if isinstance(raw, WorkSchedule):
        return raw

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Unparseable work schedule %r; treating as no schedule", raw)
            return None

    if not isinstance(raw, dict):
        logger.warning("Unsupported work schedule type %s; treating as no schedule", type(raw).__name__)
        return None

    weekday_starts: Dict[int, time] = {}
    for idx, name in enumerate(WEEKDAY_NAMES):
        start = _start_of(raw.get(name))
        if start is not None:
            weekday_starts[idx] = start

    default_start = None
    if isinstance(raw.get("hours"), dict):
        default_start = _start_of(raw["hours"])
    if default_start is None and "start" in raw:
        default_start = parse_hhmm(raw.get("start"))

    if default_start is None and not weekday_starts:
        logger.warning("Work schedule %r has no usable start time; treating as no schedule", raw)
        return None

    return WorkSchedule(start=default_start, weekday_starts=weekday_starts)
