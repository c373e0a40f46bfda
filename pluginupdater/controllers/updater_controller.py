from pathlib import Path
from types import TracebackType
from typing import Self

from pluginupdater.models.outcome import UpdateOutcome, VersionInfo
from pluginupdater.models.project import Platform, Project
from pluginupdater.models.settings import Config, collect_targets
from pluginupdater.utils.artifact_utils import (
    find_existing_artifact,
    find_extensions_folder,
    find_project_artifacts,
    is_update_available,
    target_directory,
)
from pluginupdater.utils.cleanup import (
    create_cleanup_marker,
    find_model_engine_folder,
    sweep_pending_cleanup,
)
from pluginupdater.utils.exception import (
    CleanupMarkerError,
    ParentNotInstalledError,
    UpdaterError,
)
from pluginupdater.utils.http_client import UpstreamClient
from pluginupdater.utils.installer import (
    discard,
    download_to_temp,
    install_artifact,
    same_content_size,
)
from pluginupdater.utils.log_sink import LogSink, LoguruLogSink
from pluginupdater.utils.resolvers import ResolvedArtifact, resolve_latest
from pluginupdater.utils.update_history import UpdateHistory


class UpdaterController:
    """
    Entry point of the update engine.

    Runs are synchronous and process projects one after another. A failure
    while handling one project becomes that project's outcome and never
    stops the others. Callers must not run two invocations against the same
    plugins directory at the same time.
    """

    def __init__(
        self,
        config: Config,
        client: UpstreamClient | None = None,
        log: LogSink | None = None,
        history: UpdateHistory | None = None,
    ) -> None:
        self.config = config
        self.client = client or UpstreamClient(github_token=config.github_token)
        self.log: LogSink = log or LoguruLogSink()
        self.history = history

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()
        if self.history is not None:
            self.history.close()

    def check_and_update(
        self, platform: Platform, install_dir: Path
    ) -> list[UpdateOutcome]:
        """
        Bring every enabled project up to date.

        :param platform: platform the plugins directory belongs to
        :param install_dir: shared plugins directory
        :return: one outcome per targeted project, in catalog order
        """
        targets = collect_targets(self.config, platform)
        if not targets:
            self.log.warn("No plugins are enabled for updates")
            return []

        self.log.info(
            f"Checking {len(targets)} plugin(s) for {platform.display_name} updates"
        )
        outcomes = [
            self.install_latest(project, platform, install_dir) for project in targets
        ]
        updated = sum(1 for outcome in outcomes if outcome.updated)
        failed = sum(1 for outcome in outcomes if outcome.error)
        self.log.info(f"Update run finished: {updated} updated, {failed} failed")
        return outcomes

    def install_latest(
        self, project: Project, platform: Platform, install_dir: Path
    ) -> UpdateOutcome:
        """Install the latest artifact of a single project. Never raises."""
        name = project.api_name
        try:
            outcome = self._install(project, platform, install_dir)
        except UpdaterError as e:
            self.log.error(f"Failed to update {name}: {e}")
            outcome = UpdateOutcome.failed(project, str(e))
        except Exception as e:
            self.log.error(f"Unexpected error while updating {name}", e)
            outcome = UpdateOutcome.failed(project, str(e) or type(e).__name__)

        if outcome.updated:
            self.log.info(outcome.describe())
        if self.history is not None:
            self.history.log_update(outcome)
        return outcome

    def _install(
        self, project: Project, platform: Platform, install_dir: Path
    ) -> UpdateOutcome:
        target_dir = target_directory(project, platform, install_dir)
        existing = find_existing_artifact(project, target_dir, platform)
        artifact = resolve_latest(
            project, platform, self.config.targets.channel_for(project), self.client
        )

        # A differing name is always an update. A fixed-name artifact has to be
        # downloaded before it can be compared.
        same_name = existing is not None and not is_update_available(
            existing.name, artifact.filename
        )
        if existing is not None and same_name and not project.traits.static_filename:
            return UpdateOutcome.unchanged(project, existing.name)

        stale = find_project_artifacts(project, target_dir)
        temp_path = download_to_temp(self.client, artifact.url, target_dir, project)
        if existing is not None and same_name:
            if same_content_size(temp_path, existing):
                discard(temp_path)
                return UpdateOutcome.unchanged(project, existing.name)

        installed = install_artifact(temp_path, stale, target_dir, artifact.filename)
        self._after_install(project, target_dir)
        return UpdateOutcome.updated_to(
            project, existing.name if existing else None, installed.name
        )

    def _after_install(self, project: Project, target_dir: Path) -> None:
        if not project.traits.cleanup_on_update:
            return
        if not self.config.clean_model_engine_on_update:
            return
        try:
            create_cleanup_marker(find_model_engine_folder(target_dir))
        except CleanupMarkerError as e:
            self.log.warn(f"Could not schedule cleanup for {project.api_name}: {e}")
        else:
            self.log.info(
                "GeyserModelEngine output will be cleaned on the next startup"
            )

    def check_versions(
        self, platform: Platform, install_dir: Path
    ) -> list[VersionInfo]:
        """
        Report installed and latest artifacts of every project without changing anything.

        :param platform: platform the plugins directory belongs to
        :param install_dir: shared plugins directory
        :return: one entry per catalog project, disabled ones included
        """
        results = []
        for project in Project:
            info = self._check(project, platform, install_dir)
            if self.history is not None:
                self.history.log_check(info)
            results.append(info)
        return results

    def _check(
        self, project: Project, platform: Platform, install_dir: Path
    ) -> VersionInfo:
        if not self.config.targets.is_enabled(project):
            return VersionInfo.disabled(project)

        installed: str | None = None
        try:
            directory = self._search_directory(project, platform, install_dir)
            existing = find_existing_artifact(project, directory, platform)
            installed = existing.name if existing else None
            artifact: ResolvedArtifact = resolve_latest(
                project,
                platform,
                self.config.targets.channel_for(project),
                self.client,
            )
        except UpdaterError as e:
            return VersionInfo.failed(project, str(e), installed)
        except Exception as e:
            self.log.error(f"Unexpected error while checking {project.api_name}", e)
            return VersionInfo.failed(project, str(e) or type(e).__name__, installed)

        if installed is None:
            return VersionInfo.not_installed(
                project, artifact.filename, artifact.build_number
            )
        if is_update_available(installed, artifact.filename):
            return VersionInfo.outdated(
                project, installed, artifact.filename, artifact.build_number
            )
        return VersionInfo.up_to_date(project, installed, artifact.build_number)

    @staticmethod
    def _search_directory(
        project: Project, platform: Platform, install_dir: Path
    ) -> Path:
        if project.traits.extension:
            try:
                return find_extensions_folder(platform, install_dir, create=False)
            except ParentNotInstalledError:
                return install_dir
        return install_dir

    def _model_engine_folder(
        self, platform: Platform, install_dir: Path
    ) -> Path | None:
        try:
            extensions = find_extensions_folder(platform, install_dir, create=False)
        except ParentNotInstalledError:
            return None
        return find_model_engine_folder(extensions)

    def execute_cleanup_if_pending(
        self, platform: Platform, install_dir: Path
    ) -> int | None:
        """
        Run a cleanup scheduled by an earlier update. Meant to be called at startup,
        before any update run.

        :return: number of removed entries, None when no cleanup was pending
        """
        folder = self._model_engine_folder(platform, install_dir)
        if folder is None:
            return None
        removed = sweep_pending_cleanup(folder)
        if removed is not None:
            self.log.info(f"Cleaned {removed} generated file(s) from {folder.name}")
        return removed

    def simulate_update_marker(self, platform: Platform, install_dir: Path) -> bool:
        """
        Schedule a GeyserModelEngine cleanup as if the extension had just been updated.

        :return: True if the marker was created
        """
        if not self.config.clean_model_engine_on_update:
            self.log.warn(
                "GeyserModelEngine extension or its cleanOnUpdate option is disabled"
            )
            return False

        folder = self._model_engine_folder(platform, install_dir)
        if folder is None:
            self.log.warn("GeyserModelEngine folder not found")
            return False

        try:
            create_cleanup_marker(folder)
        except CleanupMarkerError as e:
            self.log.warn(str(e))
            return False
        self.log.info(f"Cleanup scheduled in {folder.name}; restart to apply it")
        return True
