"""Talkgroup filter deciding whether a call gets transcribed."""

from __future__ import annotations

import logging
from typing import Sequence

from trunk_processor.config import FilterConfig
from trunk_processor.views import CallMetadata

logger = logging.getLogger(__name__)


def should_transcribe(
    talkgroup_id: int,
    talkgroup_group: str,
    ids: Sequence[str],
    groups: Sequence[str],
) -> bool:
    """Apply the allow/deny lists; the first matching rule wins.

    1. ``!<id>`` in ``ids`` denies.
    2. ``<id>`` in ``ids`` allows.
    3. ``talkgroup_group`` in ``groups`` allows.
    4. Anything else is denied.
    """

    tg = str(talkgroup_id)
    if f"!{tg}" in ids:
        logger.info("Talkgroup %s is explicitly excluded", tg)
        return False
    if tg in ids:
        logger.info("Talkgroup %s is explicitly included", tg)
        return True
    if talkgroup_group in groups:
        logger.info("Talkgroup %s matched group %r", tg, talkgroup_group)
        return True
    logger.debug("Talkgroup %s (%s) matched no filter", tg, talkgroup_group)
    return False


def decide_transcription(meta: CallMetadata, config: FilterConfig, *, archive: bool) -> bool:
    """Return True when ``meta`` should take the transcribe path."""

    if archive:
        return False
    if not config.enabled():
        return config.default_transcribe
    return should_transcribe(
        meta.talkgroup,
        meta.talkgroup_group,
        config.ids(),
        config.groups(),
    )


__all__ = ["decide_transcription", "should_transcribe"]
