"""Pick the checkbox items a supervisor is asked to re-verify."""
import math
import random

SAMPLE_FRACTION = 0.2


def collect_checkbox_ids(checkboxes: dict) -> list[str]:
    """
    Flatten the heading -> item map into a list of item ids.

    Ids that are themselves heading keys are dropped, since those are
    section toggles rather than items. An id listed under two headings is
    returned once.
    """
    headings = set(checkboxes)
    ids = {}
    for items in checkboxes.values():
        if not isinstance(items, dict):
            continue
        for item_id in items:
            if item_id not in headings:
                ids.setdefault(item_id, None)
    return list(ids)


def sample_size(total: int) -> int:
    """ceil(20%) of ``total``, at least 1 and never more than ``total``."""
    if total <= 0:
        return 0
    return min(total, max(1, math.ceil(total * SAMPLE_FRACTION)))


def select_random_checkboxes(checkboxes: dict, rng: random.Random | None = None) -> list[str]:
    """
    Select a uniform random ~20% of checkbox item ids without duplicates.

    Uses a Fisher-Yates shuffle over a copy of the ids and takes the first
    ``sample_size`` of them.
    """
    rng = rng or random.Random()
    ids = collect_checkbox_ids(checkboxes)
    count = sample_size(len(ids))
    if not count:
        return []

    shuffled = list(ids)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled[:count]
