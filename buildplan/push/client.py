"""
Build server client.

Submits one package per request: POST <server>/api/v1/builds with the
package's name, version and release as JSON. The server answers with the
job it queued, ``{"id": <int>, ...}``.
"""

from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Protocol

from buildplan import __version__
from buildplan.config import PushConfig
from buildplan.state.models import Package

BUILDS_ENDPOINT = "/api/v1/builds"


class PublishError(RuntimeError):
    """The build server did not accept a package."""

    def __init__(self, package: str, reason: str):
        self.package = package
        self.reason = reason
        self.published: list[Job] = []
        super().__init__(f"publishing {package} failed: {reason}")


@dataclass(frozen=True)
class Job:
    id: int
    package: str


class Publisher(Protocol):
    def publish(self, pkg: Package) -> Job: ...


class HttpPublisher:
    def __init__(self, server_url: str, *, token: str | None = None, timeout: int = 30):
        self.server_url = server_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg: PushConfig) -> "HttpPublisher":
        if not cfg.can_publish:
            raise ValueError("BUILDPLAN_SERVER_URL is not set")
        return cls(cfg.server_url, token=cfg.token, timeout=cfg.timeout)

    def _request(self, pkg: Package) -> urllib.request.Request:
        body = json.dumps(
            {"name": pkg.name, "version": pkg.version, "release": pkg.release}
        ).encode("utf-8")
        return urllib.request.Request(
            self.server_url + BUILDS_ENDPOINT,
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": f"buildplan/{__version__}",
                **({"Authorization": f"Bearer {self.token}"} if self.token else {}),
            },
        )

    def publish(self, pkg: Package) -> Job:
        req = self._request(pkg)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                data: Any = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            raise PublishError(pkg.name, f"build server returned HTTP {e.code}") from e
        except urllib.error.URLError as e:
            raise PublishError(pkg.name, f"network error: {e.reason}") from e
        except OSError as e:
            raise PublishError(pkg.name, f"network error: {e}") from e
        except (http.client.HTTPException, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PublishError(pkg.name, f"invalid response: {e}") from e

        job_id = data.get("id") if isinstance(data, dict) else None
        if isinstance(job_id, bool) or not isinstance(job_id, int):
            raise PublishError(pkg.name, f"response has no job id: {data!r}")
        return Job(id=job_id, package=pkg.name)


__all__ = ["HttpPublisher", "Job", "PublishError", "Publisher"]
