"""Update-check-and-launch sequence for the client."""

import logging
import os
import shutil
import subprocess
from collections.abc import Callable, Mapping, Sequence

from rlaunch.cache import ArtifactCache, CacheStatus
from rlaunch.credentials import CredentialStore, credentials_path
from rlaunch.errors import FilesystemError, NetworkError, SpawnError
from rlaunch.models import CachedArtifact, LaunchSpec, LauncherConfig

log = logging.getLogger(__name__)


def _resolve_executable(candidate: str) -> str | None:
    """Resolve an executable name or path to a runnable command path."""
    has_sep = os.path.sep in candidate or (
        os.path.altsep is not None and os.path.altsep in candidate
    )
    if has_sep:
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate
        return None
    return shutil.which(candidate)


def _java_candidates(config: LauncherConfig, environ: Mapping[str, str]) -> list[str]:
    if config.java_executable:
        return [config.java_executable]
    candidates: list[str] = []
    java_home = environ.get("JAVA_HOME", "").strip()
    if java_home:
        name = "java.exe" if os.name == "nt" else "java"
        candidates.append(os.path.join(java_home, "bin", name))
    candidates.append("java")
    return candidates


def resolve_java_executable(
    config: LauncherConfig, environ: Mapping[str, str] | None = None
) -> str:
    """Find the Java runtime used to run the client jar."""
    env = os.environ if environ is None else environ
    candidates = _java_candidates(config, env)
    for candidate in candidates:
        executable = _resolve_executable(candidate)
        if executable:
            return executable
    raise SpawnError(
        f"No Java runtime found (tried {', '.join(candidates)}). "
        "Install Java, set JAVA_HOME, or pass --java."
    )


def spawn(
    spec: LaunchSpec, popen: Callable[..., subprocess.Popen] = subprocess.Popen
) -> subprocess.Popen:
    """Start the child without waiting for it."""
    kwargs: dict = {
        "cwd": spec.cwd,
        "env": spec.env,
        "stdin": subprocess.DEVNULL,
    }
    if os.name == "nt":
        kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True
    try:
        process = popen(spec.argv, **kwargs)
    except OSError as e:
        raise SpawnError(f"Could not start {spec.executable}: {e}") from e
    log.info("Started client (pid %s)", getattr(process, "pid", "?"))
    return process


class Launcher:
    """Refresh the cached client, resolve credentials and start the client."""

    def __init__(
        self,
        config: LauncherConfig,
        cache: ArtifactCache | None = None,
        store: CredentialStore | None = None,
        environ: Mapping[str, str] | None = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self.config = config
        self.environ = os.environ if environ is None else environ
        if cache is None:
            cache = ArtifactCache(timeout=config.network_timeout_seconds)
        self.cache = cache
        self.store = store if store is not None else CredentialStore(self.environ)
        self.popen = popen
        self.artifact = CachedArtifact(
            local_path=config.artifact_path,
            remote_url=config.download_url,
            filename=config.artifact_filename,
        )

    def _ensure_cache_dir(self) -> None:
        try:
            self.config.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Could not create {self.config.cache_dir}: {e}") from e

    def check_for_update(self) -> CacheStatus:
        """Run the freshness check only."""
        self._ensure_cache_dir()
        return self.cache.ensure_fresh(self.artifact.remote_url, self.artifact.local_path)

    def _refresh(self) -> None:
        try:
            status = self.check_for_update()
        except NetworkError as e:
            if not (self.config.allow_stale_cache and self.artifact.exists()):
                raise
            log.warning("Update check failed, launching cached client: %s", e)
            return
        log.debug("freshness check: %s", status)

    def build_launch_spec(
        self, credentials: Mapping[str, str], client_args: Sequence[str] = ()
    ) -> LaunchSpec:
        """Describe the child process: java -jar <artifact> with credentials in its env."""
        executable = resolve_java_executable(self.config, self.environ)
        env = dict(self.environ)
        env.update(credentials)
        return LaunchSpec(
            executable=executable,
            argv=[executable, "-jar", str(self.artifact.local_path), *client_args],
            cwd=str(self.config.cache_dir),
            env=env,
        )

    def run(
        self, client_args: Sequence[str] = (), check_updates: bool = True
    ) -> subprocess.Popen:
        """Refresh the cache if asked, then start the client and return its handle."""
        if check_updates:
            self._refresh()
        else:
            self._ensure_cache_dir()
            log.info("Skipping update check")

        if not self.artifact.exists():
            raise SpawnError(
                f"No cached client at {self.artifact.local_path}; run without --offline first"
            )

        credentials = self.store.resolve(
            credentials_path(self.config, self.environ), self.config.launcher_vars
        )
        spec = self.build_launch_spec(credentials, client_args)
        log.info("Running %s", self.artifact.local_path)
        return spawn(spec, self.popen)
