from enum import Enum
from typing import Self

import msgspec

from pluginupdater.models.project import Project


class OutcomeStatus(Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


class UpdateOutcome(msgspec.Struct, frozen=True):
    """
    Result of one install attempt for one project.

    Exactly one of updated / skipped_no_change / error holds. Build instances
    through updated_to, unchanged or failed rather than the constructor.
    """

    project: Project
    status: OutcomeStatus
    message: str = ""
    old_filename: str | None = None
    new_filename: str | None = None

    @classmethod
    def updated_to(
        cls, project: Project, old_filename: str | None, new_filename: str
    ) -> Self:
        return cls(
            project,
            OutcomeStatus.UPDATED,
            old_filename=old_filename,
            new_filename=new_filename,
        )

    @classmethod
    def unchanged(cls, project: Project, filename: str) -> Self:
        return cls(
            project,
            OutcomeStatus.UNCHANGED,
            old_filename=filename,
            new_filename=filename,
        )

    @classmethod
    def failed(cls, project: Project, error: str) -> Self:
        # Failures always carry a non-empty message
        return cls(project, OutcomeStatus.FAILED, message=error or "Unknown error")

    @property
    def updated(self) -> bool:
        return self.status is OutcomeStatus.UPDATED

    @property
    def skipped_no_change(self) -> bool:
        return self.status is OutcomeStatus.UNCHANGED

    @property
    def error(self) -> str | None:
        return self.message if self.status is OutcomeStatus.FAILED else None

    def describe(self) -> str:
        """One-line human readable summary."""
        name = self.project.api_name
        match self.status:
            case OutcomeStatus.UPDATED:
                if self.old_filename:
                    return f"{name}: updated {self.old_filename} -> {self.new_filename}"
                return f"{name}: installed {self.new_filename}"
            case OutcomeStatus.UNCHANGED:
                return f"{name}: already up to date ({self.new_filename})"
            case _:
                return f"{name}: failed - {self.message}"


class VersionInfo(msgspec.Struct, frozen=True):
    """Read-only comparison of the installed and latest artifact of a project."""

    project: Project
    enabled: bool
    installed: str | None = None
    latest: str | None = None
    update_available: bool = False
    error: str | None = None
    build_number: int | None = None

    @classmethod
    def disabled(cls, project: Project) -> Self:
        return cls(project, enabled=False)

    @classmethod
    def failed(cls, project: Project, error: str, installed: str | None = None) -> Self:
        return cls(project, enabled=True, installed=installed, error=error)

    @classmethod
    def up_to_date(
        cls, project: Project, filename: str, build_number: int | None = None
    ) -> Self:
        return cls(
            project,
            enabled=True,
            installed=filename,
            latest=filename,
            build_number=build_number,
        )

    @classmethod
    def outdated(
        cls,
        project: Project,
        installed: str,
        latest: str,
        build_number: int | None = None,
    ) -> Self:
        return cls(
            project,
            enabled=True,
            installed=installed,
            latest=latest,
            update_available=True,
            build_number=build_number,
        )

    @classmethod
    def not_installed(
        cls, project: Project, latest: str, build_number: int | None = None
    ) -> Self:
        return cls(
            project,
            enabled=True,
            latest=latest,
            update_available=True,
            build_number=build_number,
        )
