"""
Output sources.

Fetch the complete stdout of each container once the workload has stopped.
Errors from the container runtime are not interpreted here; they propagate
to the caller unchanged.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol

import docker

from lifecycle_timeline.config import config
from lifecycle_timeline.events import validate_name
from lifecycle_timeline.exceptions import WorkloadStillRunningError

logger = logging.getLogger(__name__)

_ACTIVE_STATES = {"running", "restarting", "paused"}


class OutputSource(Protocol):
    def fetch(self, names: Iterable[str]) -> dict[str, str]: ...


class DirectoryOutputSource:
    """
    Reads captured output saved as <root>/<name>.log.

    A missing file yields an empty blob so the parser reports the
    container as having no events.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def fetch(self, names: Iterable[str]) -> dict[str, str]:
        blobs: dict[str, str] = {}
        for name in names:
            path = self.root / f"{validate_name(name)}.log"
            if not path.exists():
                logger.warning(f"No captured output for {name} at {path}")
                blobs[name] = ""
                continue
            blobs[name] = path.read_text(encoding="utf-8", errors="replace")
        return blobs


class DockerOutputSource:
    """
    Reads container stdout through the Docker API.
    """

    def __init__(self, client=None, *, wait_timeout: int | None = None):
        self.client = client or docker.from_env(timeout=config.DOCKER_TIMEOUT)
        self.wait_timeout = wait_timeout

    def fetch(self, names: Iterable[str]) -> dict[str, str]:
        blobs: dict[str, str] = {}
        for name in names:
            container = self.client.containers.get(name)
            if self.wait_timeout is not None:
                logger.info(f"Waiting up to {self.wait_timeout}s for {name} to stop...")
                container.wait(timeout=self.wait_timeout)
            container.reload()
            if container.status in _ACTIVE_STATES:
                raise WorkloadStillRunningError(name, container.status)

            raw = container.logs(stdout=True, stderr=False)
            blobs[name] = raw.decode("utf-8", errors="replace")
            logger.debug(f"Fetched {len(raw)} bytes of output from {name} ({container.status})")
        return blobs
