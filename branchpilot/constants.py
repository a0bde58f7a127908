"""Shipped defaults and platform limits."""

# Hard ceiling for a branch name, independent of configuration
HARD_MAX_LENGTH = 250

REFS_HEADS = "refs/heads/"

_TITLE_TEMPLATE = "{prefix}{wi.id}-{wi.title}"


def _regex_rule(name: str, match: str, prefix: str) -> dict:
    return {"name": name, "matchType": "regex", "match": match, "prefix": prefix, "template": _TITLE_TEMPLATE}


# Applied when no config file exists, and merged under stored configs so that
# fields added in later versions get populated for older files.
DEFAULT_CONFIG: dict = {
    "schemaVersion": 1,
    "general": {
        "lowercase": True,
        "nonAlnumReplacement": "-",
        "maxLength": 80,
        "allowManualNameOverride": True,
        "language": "en",
    },
    "defaults": {
        "template": "feature/{wi.id}-{wi.title}",
    },
    "repoOverrides": {},
    "rulesBySourceBranch": [
        # app/ prefixed branches
        _regex_rule("App hotfix branch rule", r"^app/hotfix(/.*)?$", "app/hotfix/"),
        _regex_rule("App develop branch rule", r"^app/develop$", "app/feature/"),
        _regex_rule("App release numbered branch rule", r"^app/release\d+(/.*)?$", "app/release/"),
        _regex_rule("App release branch rule", r"^app/release(/.*)?$", "app/release/"),
        _regex_rule("App mac branch rule", r"^app/mac$", "app/mac/"),
        _regex_rule("App ril branch rule", r"^app/ril$", "app/ril/"),
        # standard branches
        _regex_rule("Hotfix branch rule", r"^hotfix(/.*)?$", "hotfix/"),
        _regex_rule("Develop branch rule", r"^develop$", "feature/"),
        _regex_rule("Release numbered branch rule", r"^release\d+(/.*)?$", "release/"),
        _regex_rule("Release branch rule", r"^release(/.*)?$", "release/"),
        _regex_rule("Mac branch rule", r"^mac$", "mac/"),
        _regex_rule("Ril branch rule", r"^ril$", "ril/"),
    ],
    "rulesByWorkItemType": [
        {
            "workItemType": "Bug",
            "prefix": "bugfix/",
            "template": _TITLE_TEMPLATE,
            "workItemState": {"enabled": True, "state": "Active"},
        },
        {
            "workItemType": "User Story",
            "prefix": "feature/",
            "template": _TITLE_TEMPLATE,
            "workItemState": {"enabled": True, "state": "Active"},
        },
        {
            "workItemType": "Task",
            "prefix": "task/",
            "template": _TITLE_TEMPLATE,
        },
    ],
}
