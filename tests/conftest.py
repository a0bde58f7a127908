"""Shared test fixtures."""

import pytest

import branchpilot.settings as settings_module
from branchpilot.models import BranchPilotConfig, WorkItemContext


@pytest.fixture(autouse=True)
def reset_lru_cache():
    """Clear the config file cache before each test."""
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


@pytest.fixture
def bug() -> WorkItemContext:
    return WorkItemContext(id=42, title="Fix login bug", type="Bug", state="New")


@pytest.fixture
def user_story() -> WorkItemContext:
    return WorkItemContext(id=7, title="Add login feature", type="User Story", state="New", assigned_to="Jane Doe")


@pytest.fixture
def task() -> WorkItemContext:
    return WorkItemContext(id=99, title="Write unit tests", type="Task", state="Active")


@pytest.fixture
def config() -> BranchPilotConfig:
    return BranchPilotConfig.model_validate(
        {
            "general": {"lowercase": True, "nonAlnumReplacement": "-", "maxLength": 80},
            "defaults": {"template": "feature/{wi.id}-{wi.title}"},
            "rulesBySourceBranch": [
                {
                    "name": "Hotfix glob",
                    "matchType": "glob",
                    "match": "hotfix/*",
                    "prefix": "hotfix/",
                    "template": "{prefix}{wi.id}-{wi.title}",
                    "workItemState": {"enabled": True, "state": "In Progress"},
                },
                {
                    "name": "Hotfix root regex",
                    "matchType": "regex",
                    "match": "^hotfix$",
                    "prefix": "hotfix/",
                    "template": "{prefix}{wi.id}-{wi.title}",
                },
                {
                    "name": "Release glob",
                    "matchType": "glob",
                    "match": "release/*",
                    "prefix": "release/",
                    "template": "{prefix}{wi.id}-{wi.title}",
                },
            ],
            "rulesByWorkItemType": [
                {
                    "workItemType": "Bug",
                    "prefix": "bugfix/",
                    "template": "{prefix}{wi.id}-{wi.title}",
                    "workItemState": {"enabled": True, "state": "Active"},
                },
                {
                    "workItemType": "User Story",
                    "prefix": "feature/",
                    "template": "{prefix}{wi.id}-{wi.title}",
                },
            ],
        }
    )
