"""Abstract base class for branch hosts."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict


class RefUpdate(BaseModel):
    """Raw outcome of a ref creation, before classification."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str = ""


class BranchHost(ABC):
    @abstractmethod
    async def list_branches(self) -> list[str]: ...

    @abstractmethod
    async def branch_exists(self, name: str) -> bool: ...

    @abstractmethod
    async def create_branch(self, name: str, source: str) -> RefUpdate: ...

    @abstractmethod
    def invalidate(self) -> None:
        """Drop any cached branch listing."""
