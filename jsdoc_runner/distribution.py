"""
distribution.py

Responsibility: Isolate all npm registry interaction.

This module must be the only place that:
- Constructs registry endpoints
- Downloads and unpacks generator release tarballs

It is used when no generator tool directory is configured: a release is
installed under a local directory and that becomes the tool directory.
"""

from __future__ import annotations

import hashlib
import io
import logging
import shutil
import tarfile
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

logger = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    pass


@dataclass(frozen=True)
class ReleaseInfo:
    name: str
    version: str
    tarball_url: str
    shasum: str


class RegistryClient:
    def __init__(self, registry_base: str = "https://registry.npmjs.org", timeout: float = 30) -> None:
        self._registry_base = registry_base.rstrip("/")
        self._timeout = timeout

    def _get(self, url: str) -> requests.Response:
        try:
            r = requests.get(url, headers={"User-Agent": "jsdoc-runner"}, timeout=self._timeout)
        except requests.RequestException as e:
            raise RegistryError(f"Registry request failed: GET {url}") from e
        if r.status_code >= 400:
            raise RegistryError(f"Registry error {r.status_code} GET {url}")
        return r

    def get_release(self, name: str, version: str = "latest") -> ReleaseInfo:
        """
        Look up one published version (or dist-tag such as `latest`).
        """
        url = f"{self._registry_base}/{name}/{version}"
        try:
            data: dict[str, Any] = self._get(url).json()
        except ValueError as e:
            raise RegistryError(f"Registry returned invalid JSON for {name}@{version}") from e

        dist = data.get("dist") or {}
        if not dist.get("tarball") or not dist.get("shasum"):
            raise RegistryError(f"Registry metadata for {name}@{version} has no dist tarball.")
        return ReleaseInfo(
            name=name,
            version=str(data.get("version") or version),
            tarball_url=dist["tarball"],
            shasum=dist["shasum"],
        )

    def install(self, release: ReleaseInfo, destination: str | Path) -> Path:
        """
        Download, verify, and unpack a release; return its package directory.

        npm tarballs keep everything under a top-level `package/` folder.
        """
        target = Path(destination).resolve() / f"{release.name}-{release.version}"
        package_dir = target / "package"
        if package_dir.is_dir():
            logger.debug("Reusing %s@%s at %s", release.name, release.version, package_dir)
            return package_dir

        logger.info("Downloading %s@%s", release.name, release.version)
        payload = self._get(release.tarball_url).content
        digest = hashlib.sha1(payload).hexdigest()
        if digest != release.shasum:
            raise RegistryError(
                f"Checksum mismatch for {release.name}@{release.version}: expected {release.shasum}, got {digest}"
            )

        target.mkdir(parents=True, exist_ok=True)
        # package/ only appears once extraction has fully succeeded.
        staging = Path(tempfile.mkdtemp(prefix=".unpack-", dir=target))
        try:
            with tarfile.open(fileobj=io.BytesIO(payload), mode="r:gz") as archive:
                members = archive.getmembers()
                for member in members:
                    member_path = (staging / member.name).resolve()
                    if staging != member_path and staging not in member_path.parents:
                        raise RegistryError(f"Refusing to extract outside destination: {member.name}")
                    if member.issym() or member.islnk():
                        raise RegistryError(f"Refusing to extract link member: {member.name}")
                if hasattr(tarfile, "data_filter"):
                    archive.extractall(staging, members=members, filter="data")
                else:
                    archive.extractall(staging, members=members)

            if not (staging / "package").is_dir():
                raise RegistryError(f"Tarball for {release.name}@{release.version} has no package/ directory.")
            (staging / "package").replace(package_dir)
        except tarfile.TarError as e:
            raise RegistryError(f"Could not unpack {release.tarball_url}") from e
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        return package_dir
