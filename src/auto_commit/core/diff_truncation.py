"""Diff truncation for LLM prompts.

Large diffs are cut down to a per-provider character budget while keeping
their overall shape: a head slice (file headers, first hunks), a middle
sample taken around the midpoint, and a tail slice (the most recent
hunks). Removed spans are replaced by markers stating how many bytes were
dropped.

The output never exceeds the budget, so truncating an already truncated
diff with the same budget returns it unchanged.
"""

from __future__ import annotations

import structlog

from auto_commit.config.schema import TruncationConfig
from auto_commit.utils.logging import LogEventNames

log = structlog.get_logger()

HEAD_RATIO = 0.3
TAIL_RATIO = 0.4

# Smallest budget that leaves room for content next to two markers
MIN_BUDGET = 200

MARKER_TEMPLATE = "\n[... {removed} bytes truncated ...]\n"


def _marker(removed_text: str) -> str:
    return MARKER_TEMPLATE.format(removed=len(removed_text.encode("utf-8")))


def _snap_end(text: str, end: int, floor: int) -> int:
    """Move ``end`` back to just after the last newline in ``text[floor:end]``."""
    cut = text.rfind("\n", floor, end)
    return cut + 1 if cut >= floor else end


def _snap_start(text: str, start: int, ceiling: int) -> int:
    """Move ``start`` forward to just after the next newline before ``ceiling``."""
    cut = text.find("\n", start, ceiling)
    return cut + 1 if cut != -1 else start


def truncate_diff(
    diff: str,
    budget: int,
    head_ratio: float = HEAD_RATIO,
    tail_ratio: float = TAIL_RATIO,
) -> str:
    """Truncate ``diff`` to at most ``budget`` characters.

    Args:
        diff: Unified diff text.
        budget: Maximum length of the result, markers included.
        head_ratio: Share of the content budget kept from the start.
        tail_ratio: Share of the content budget kept from the end.

    Returns:
        The diff unchanged when it fits, otherwise head, middle sample and
        tail separated by truncation markers.

    Raises:
        ValueError: If the budget is too small or the ratios leave no middle.
    """
    if budget < MIN_BUDGET:
        raise ValueError(f"Truncation budget must be at least {MIN_BUDGET}: {budget}")
    if head_ratio <= 0 or tail_ratio <= 0 or head_ratio + tail_ratio >= 1:
        raise ValueError("head_ratio and tail_ratio must be positive and sum to less than 1")

    if len(diff) <= budget:
        return diff

    # Reserve room for two markers with the widest possible byte count
    widest = MARKER_TEMPLATE.format(removed="9" * len(str(len(diff.encode("utf-8")))))
    available = budget - 2 * len(widest)

    head_len = int(available * head_ratio)
    tail_len = int(available * tail_ratio)
    middle_len = available - head_len - tail_len

    head_end = _snap_end(diff, head_len, 0)
    tail_start = _snap_start(diff, len(diff) - tail_len, len(diff))

    mid_start = max(head_end, len(diff) // 2 - middle_len // 2)
    mid_end = min(tail_start, mid_start + middle_len)
    mid_start = _snap_start(diff, mid_start, mid_end)
    mid_end = _snap_end(diff, mid_end, mid_start)

    head = diff[:head_end]
    tail = diff[tail_start:]

    if mid_end > mid_start:
        middle = diff[mid_start:mid_end]
        result = (
            head
            + _marker(diff[head_end:mid_start])
            + middle
            + _marker(diff[mid_end:tail_start])
            + tail
        )
    else:
        result = head + _marker(diff[head_end:tail_start]) + tail

    log.info(
        LogEventNames.DIFF_TRUNCATED,
        original_length=len(diff),
        truncated_length=len(result),
        budget=budget,
    )
    return result


class DiffTruncator:
    """Applies the configured truncation budget for an LLM provider."""

    def __init__(self, config: TruncationConfig | None = None) -> None:
        self._config = config or TruncationConfig()

    def budget_for(self, provider: str) -> int:
        return self._config.budgets.get(provider, self._config.default_budget)

    def truncate(self, diff: str, provider: str) -> str:
        return truncate_diff(
            diff,
            self.budget_for(provider),
            head_ratio=self._config.head_ratio,
            tail_ratio=self._config.tail_ratio,
        )
