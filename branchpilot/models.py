"""Shared pydantic models — the contract between config, rules engine and branch service."""

import fnmatch
import logging
import re
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# innermost `{a,b}` group of a glob
_BRACE_RE = re.compile(r"\{([^{}]*,[^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand `{a,b}` alternation, which fnmatch does not support.

    "release/{1,2}.*" → ["release/1.*", "release/2.*"]
    """
    m = _BRACE_RE.search(pattern)
    if not m:
        return [pattern]
    head, tail = pattern[: m.start()], pattern[m.end() :]
    return [expanded for alt in m.group(1).split(",") for expanded in expand_braces(head + alt + tail)]


class _ConfigModel(BaseModel):
    # Stored configs use camelCase keys; Python callers may use snake_case.
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class MatchType(str, Enum):
    GLOB = "glob"
    REGEX = "regex"


class StateDirective(_ConfigModel):
    """Work item state to request after the branch has been created."""

    enabled: bool = False
    state: str = ""


class GeneralConfig(_ConfigModel):
    lowercase: bool = True
    non_alnum_replacement: str = "-"
    max_length: int = 80
    allow_manual_name_override: bool = True
    language: Literal["en", "it"] = "en"


class DefaultsConfig(_ConfigModel):
    template: str = "feature/{wi.id}-{wi.title}"
    work_item_state: StateDirective | None = None


class RepoOverride(_ConfigModel):
    default_template: str | None = None
    work_item_state: StateDirective | None = None


class SourceBranchRule(_ConfigModel):
    name: str
    match_type: MatchType = MatchType.GLOB
    match: str
    prefix: str = ""
    template: str
    work_item_state: StateDirective | None = None

    def matches(self, candidate: str) -> bool:
        """Test candidate against this rule's pattern. Bad patterns never match."""
        try:
            if self.match_type is MatchType.GLOB:
                # fnmatch's `*` also spans `/`, so `hotfix/*` matches `hotfix/a/b`
                return any(
                    re.fullmatch(fnmatch.translate(p), candidate, re.IGNORECASE) is not None
                    for p in expand_braces(self.match)
                )
            return re.search(self.match, candidate) is not None
        except re.error as exc:
            logger.debug("Skipping rule %r: invalid pattern %r (%s)", self.name, self.match, exc)
            return False


class WorkItemTypeRule(_ConfigModel):
    work_item_type: str
    prefix: str | None = None
    template: str
    work_item_state: StateDirective | None = None


class BranchPilotConfig(_ConfigModel):
    schema_version: int = 1
    general: GeneralConfig = GeneralConfig()
    defaults: DefaultsConfig = DefaultsConfig()
    repo_overrides: dict[str, RepoOverride] = {}
    rules_by_source_branch: list[SourceBranchRule] = []
    rules_by_work_item_type: list[WorkItemTypeRule] = []


class WorkItemContext(_ConfigModel):
    """Read-only snapshot of a work item, as fetched by the tracker."""

    id: int = Field(gt=0)
    title: str
    type: str
    state: str
    assigned_to: str | None = None
    iteration_path: str | None = None
    area_path: str | None = None
    changed_date: str | None = None
    type_icon: str | None = None  # UI only
    type_color: str | None = None  # hex without '#', UI only


class ResolvedRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    template: str
    prefix: str = ""
    work_item_state: StateDirective | None = None
    matched_rule_name: str  # "default" when nothing matched


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    errors: list[str] = []
    warnings: list[str] = []


class CreateBranchResult(BaseModel):
    """Returned by BranchService.create_branch — never raised, always returned."""

    model_config = ConfigDict(frozen=True)

    success: bool
    branch_name: str
    error_kind: Literal["branch_conflict", "branch_exists", "permission_denied", "unknown"] | None = None
    error: str | None = None
    suggestion: str | None = None  # only for branch_exists
    conflicting_ref: str | None = None  # only for branch_conflict
