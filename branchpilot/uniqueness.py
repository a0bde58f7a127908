"""Derive an available branch name by appending -2, -3, …"""

import logging
import re
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 100

_NUMERIC_SUFFIX_RE = re.compile(r"^(.+)-(\d+)$", re.DOTALL)

ExistsFn = Callable[[str], Awaitable[bool]]


def split_numeric_suffix(name: str) -> tuple[str, int]:
    """Return (base, first counter to try).

    "feature/1-foo-3" → ("feature/1-foo", 4)
    "feature/1-foo"   → ("feature/1-foo", 2)
    """
    m = _NUMERIC_SUFFIX_RE.match(name)
    if m:
        return m.group(1), int(m.group(2)) + 1
    return name, 2


async def resolve_unique_name(desired: str, exists: ExistsFn) -> str:
    """Return desired if free, otherwise the first free `<base>-<n>` variant."""
    if not await exists(desired):
        return desired
    return await suggest_alternative_name(desired, exists)


async def suggest_alternative_name(taken: str, exists: ExistsFn) -> str:
    """Return a variant of a name already known to be taken.

    Probes run one at a time. After MAX_ATTEMPTS a millisecond timestamp
    suffix is returned without checking it.
    """
    base, counter = split_numeric_suffix(taken)
    for candidate_counter in range(counter, counter + MAX_ATTEMPTS):
        candidate = f"{base}-{candidate_counter}"
        if not await exists(candidate):
            return candidate

    logger.warning("No free name after %d attempts for %r, using timestamp suffix", MAX_ATTEMPTS, base)
    return f"{base}-{int(time.time() * 1000)}"
