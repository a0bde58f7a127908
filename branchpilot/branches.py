"""Branch creation on top of a BranchHost."""

import logging
import re

from branchpilot.hosts.base import BranchHost
from branchpilot.models import CreateBranchResult
from branchpilot.uniqueness import resolve_unique_name, suggest_alternative_name

logger = logging.getLogger(__name__)

# "'refs/heads/hotfix' exists; cannot create 'refs/heads/hotfix/42'" (git)
# "Name conflicts with refs/heads/hotfix" (hosted services)
_PATH_CONFLICT_RES = (
    re.compile(r"'refs/heads/([^']+)' exists; cannot create", re.IGNORECASE),
    re.compile(r"conflicts?\s+with\s+refs/heads/(\S+)", re.IGNORECASE),
)


class BranchService:
    def __init__(self, host: BranchHost) -> None:
        self._host = host

    async def create_branch(self, branch_name: str, source: str) -> CreateBranchResult:
        """Create branch_name (or its first free -N variant) from source.

        Failures are classified and returned, never raised. There is no retry
        after a conflict: a concurrent creator may win between probe and create.
        """
        name = await resolve_unique_name(branch_name, self._host.branch_exists)
        logger.info("Creating branch %s from %s", name, source)

        outcome = await self._host.create_branch(name, source)
        if outcome.success:
            self._host.invalidate()
            logger.info("Branch %s created", name)
            return CreateBranchResult(success=True, branch_name=name)

        message = outcome.message or "Unknown error from ref update"
        logger.warning("Branch creation failed for %s: %s", name, message)

        for pattern in _PATH_CONFLICT_RES:
            m = pattern.search(message)
            if m:
                return CreateBranchResult(
                    success=False,
                    branch_name=name,
                    error_kind="branch_conflict",
                    error=message,
                    conflicting_ref=m.group(1),
                )

        lowered = message.lower()
        if "already exists" in lowered or "conflict" in lowered:
            # The listing that cleared `name` is stale now
            self._host.invalidate()
            suggestion = await suggest_alternative_name(name, self._host.branch_exists)
            return CreateBranchResult(
                success=False,
                branch_name=name,
                error_kind="branch_exists",
                error=message,
                suggestion=suggestion,
            )

        if "permission denied" in lowered or "forbidden" in lowered:
            return CreateBranchResult(
                success=False, branch_name=name, error_kind="permission_denied", error=message
            )

        return CreateBranchResult(success=False, branch_name=name, error_kind="unknown", error=message)
