"""Exceptions raised by the collaborators around the naming engine."""


class BranchPilotError(Exception):
    pass


class ConfigError(BranchPilotError):
    """Config file could not be read or does not match the schema."""


class GitCommandError(BranchPilotError):
    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{' '.join(command)} failed ({returncode}): {stderr.strip()}")
