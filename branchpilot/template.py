"""Token substitution for branch name templates."""

import re
from collections.abc import Callable
from typing import NamedTuple

from branchpilot.models import WorkItemContext

_TOKEN_RE = re.compile(r"\{([^}]+)\}")


class TemplateContext(NamedTuple):
    work_item: WorkItemContext
    prefix: str = ""


# Token names are persisted inside user-authored templates; keep them stable.
TOKENS: dict[str, Callable[[TemplateContext], str]] = {
    "wi.id": lambda ctx: str(ctx.work_item.id),
    "wi.title": lambda ctx: ctx.work_item.title,  # sanitized downstream
    "wi.type": lambda ctx: ctx.work_item.type,
    "wi.state": lambda ctx: ctx.work_item.state,
    "wi.assignedTo": lambda ctx: ctx.work_item.assigned_to or "",
    "prefix": lambda ctx: ctx.prefix,
}


def render(template: str, context: TemplateContext) -> str:
    """Replace every `{token}` in template. Unknown tokens render as ''.

    "{prefix}{wi.id}-{wi.title}" with prefix "bugfix/" → "bugfix/42-Fix login bug"
    "{ wi.id }-{wi.nope}"                              → "42-"
    """

    def _resolve(match: re.Match[str]) -> str:
        accessor = TOKENS.get(match.group(1).strip())
        return accessor(context) if accessor else ""

    return _TOKEN_RE.sub(_resolve, template)
