"""Helpers for target selection and suite planning."""

from __future__ import annotations

import logging
import random
from datetime import UTC, datetime
from typing import Sequence

from tb_runner.models.config import TargetDescriptor

logger = logging.getLogger(__name__)


def generate_run_id() -> str:
    """Generate a timestamp-based run id."""
    return datetime.now(UTC).strftime("run-%Y%m%d-%H%M%S-%f")


def enabled_targets(targets: Sequence[TargetDescriptor]) -> list[TargetDescriptor]:
    selected = []
    for target in targets:
        if target.enabled:
            selected.append(target)
        else:
            logger.info("Skipping disabled target '%s'", target.name)
    return selected


def plan_run_queue(
    targets: Sequence[TargetDescriptor],
    avg_times: int,
    rng: random.Random | None = None,
    *,
    shuffle: bool = True,
) -> list[TargetDescriptor]:
    """Build the ordered queue of target runs for one suite.

    Enabled targets are repeated ``avg_times`` times; each batch is shuffled
    on its own so no target is systematically measured first.
    """
    if avg_times < 1:
        raise ValueError("avg_times must be a positive integer")
    rng = rng or random.Random()
    selected = enabled_targets(targets)
    queue: list[TargetDescriptor] = []
    for _ in range(avg_times):
        batch = list(selected)
        if shuffle:
            rng.shuffle(batch)
        queue.extend(batch)
    return queue
