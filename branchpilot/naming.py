"""Branch name sanitization, truncation and validation.

All functions are pure: no I/O, no mutation of their inputs.
"""

import re

from branchpilot.constants import HARD_MAX_LENGTH, REFS_HEADS
from branchpilot.models import GeneralConfig, ValidationResult

_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9_.\-]")
# optional leading segment, then the work item id, then the title tail
_ID_NAME_RE = re.compile(r"^([^/]*/)?(\d+-)(.*)$", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s")
# characters git's ref grammar rejects
_FORBIDDEN_CHARS_RE = re.compile(r"[~^:?*\[\\]")


def sanitize_segment(value: str, replacement: str = "-") -> str:
    """Sanitize one `/`-delimited segment of a branch name.

    "hello   world" → "hello-world"
    "café résumé"   → "caf-r-sum"
    """
    result = _DISALLOWED_RE.sub(replacement, value)
    escaped = re.escape(replacement)
    if replacement:
        result = re.sub(f"(?:{escaped})+", replacement, result)
    return re.sub(f"^[{escaped}.]+|[{escaped}.]+$", "", result)


def sanitize_name(name: str, general: GeneralConfig) -> str:
    """Turn a rendered template into a legal branch name.

    Segments are sanitized independently and empty ones dropped, the result
    is lowercased if configured and truncated to general.max_length.
    """
    segments = (sanitize_segment(seg, general.non_alnum_replacement) for seg in name.split("/"))
    result = "/".join(seg for seg in segments if seg)

    if general.lowercase:
        result = result.lower()

    if len(result) > general.max_length:
        result = truncate(result, general.max_length, general.non_alnum_replacement)

    return result


def truncate(name: str, max_length: int, replacement: str = "-") -> str:
    """Truncate name to max_length, keeping the work item id whenever possible.

    "feature/12345-this-is-a-very-long-title" (30) → "feature/12345-this-is-a-very-l"
    """
    if len(name) <= max_length:
        return name

    junk = "-./" + replacement
    m = _ID_NAME_RE.match(name)
    if m:
        lead = (m.group(1) or "") + m.group(2)
        available = max_length - len(lead)
        if available >= 0:
            tail = m.group(3)[:available].rstrip(junk)
            # no title left: drop the separator after the id
            return lead + tail if tail else lead.rstrip(junk)
        # lead + id alone does not fit
        return name[:max_length]

    return name[:max_length].rstrip(junk)


def validate(name: str, max_length: int) -> ValidationResult:
    """Check name against git's ref rules. Every violation is reported."""
    errors: list[str] = []
    warnings: list[str] = []

    if not name.strip():
        errors.append("Branch name cannot be empty.")

    if len(name) > max_length:
        warnings.append(f"Branch name is {len(name)} characters (max: {max_length}).")

    if len(name) > HARD_MAX_LENGTH:
        errors.append(f"Branch name exceeds the hard limit of {HARD_MAX_LENGTH} characters.")

    if _WHITESPACE_RE.search(name):
        errors.append("Branch name cannot contain spaces.")
    if ".." in name:
        errors.append('Branch name cannot contain "..".')
    if name.startswith("-") or name.endswith("-"):
        errors.append("Branch name cannot start or end with a hyphen.")
    if _FORBIDDEN_CHARS_RE.search(name):
        errors.append("Branch name contains invalid characters.")
    if name.endswith(".lock"):
        errors.append('Branch name cannot end with ".lock".')

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def strip_refs_heads(branch: str) -> str:
    return branch.removeprefix(REFS_HEADS)
