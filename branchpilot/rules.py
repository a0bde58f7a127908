"""Branch naming rule resolution.

Precedence, first match wins within each tier:

1. rules_by_source_branch  (glob or regex against the source branch)
2. rules_by_work_item_type (case-insensitive type name)
3. defaults
"""

import logging

from branchpilot.models import BranchPilotConfig, ResolvedRule, WorkItemContext
from branchpilot.naming import sanitize_name
from branchpilot.template import TemplateContext, render

logger = logging.getLogger(__name__)

DEFAULT_RULE_NAME = "default"


class RulesEngine:
    def __init__(self, config: BranchPilotConfig) -> None:
        self._config = config

    def resolve_rule(self, source_branch: str, work_item_type: str) -> ResolvedRule:
        for rule in self._config.rules_by_source_branch:
            if rule.matches(source_branch):
                logger.debug("Source branch %r matched rule %r", source_branch, rule.name)
                return ResolvedRule(
                    template=rule.template,
                    prefix=rule.prefix,
                    work_item_state=rule.work_item_state,
                    matched_rule_name=rule.name,
                )

        wanted = work_item_type.lower()
        for type_rule in self._config.rules_by_work_item_type:
            if type_rule.work_item_type.lower() == wanted:
                logger.debug("Work item type %r matched", type_rule.work_item_type)
                return ResolvedRule(
                    template=type_rule.template,
                    prefix=type_rule.prefix or "",
                    work_item_state=type_rule.work_item_state,
                    matched_rule_name=f"WI type: {type_rule.work_item_type}",
                )

        return ResolvedRule(
            template=self._config.defaults.template,
            prefix="",
            work_item_state=self._config.defaults.work_item_state,
            matched_rule_name=DEFAULT_RULE_NAME,
        )

    def compute_branch_name(self, work_item: WorkItemContext, source_branch: str) -> str:
        branch_name, _ = self.compute_with_rule(work_item, source_branch)
        return branch_name

    def compute_with_rule(self, work_item: WorkItemContext, source_branch: str) -> tuple[str, ResolvedRule]:
        """Return the sanitized branch name together with the rule that produced it."""
        rule = self.resolve_rule(source_branch, work_item.type)
        raw = render(rule.template, TemplateContext(work_item=work_item, prefix=rule.prefix))
        return sanitize_name(raw, self._config.general), rule
