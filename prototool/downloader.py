"""Download and cache protoc releases."""

from __future__ import annotations

import base64
import hashlib
import io
import logging
import os
import platform
import shutil
import subprocess
import sys
import threading
import urllib.error
import urllib.request
import zipfile
from collections.abc import Callable
from typing import Optional

from prototool.settings import Config
from prototool.vars import DEFAULT_PROTOC_VERSION

_RELEASES_URL = "https://github.com/protocolbuffers/protobuf/releases"

_GOARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}


class DownloadError(RuntimeError):
    """Raised when protoc cannot be located, downloaded or verified."""


def _current_goos() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    return sys.platform


def _current_goarch() -> str:
    machine = platform.machine().lower()
    return _GOARCH_ALIASES.get(machine, machine)


def uname_paths(goos: str, goarch: str) -> tuple[str, str]:
    """Return the `uname -s` and `uname -m` values for a platform."""
    uname_s = {"darwin": "Darwin", "linux": "Linux"}.get(goos)
    if uname_s is None:
        raise DownloadError(f"unsupported value for runtime.GOOS: {goos}")
    uname_m = {"amd64": "x86_64"}.get(goarch)
    if uname_m is None:
        raise DownloadError(f"unsupported value for runtime.GOARCH: {goarch}")
    return uname_s, uname_m


def protoc_os_name(goos: str) -> str:
    """Return the operating system name used in protoc release file names."""
    name = {"darwin": "osx", "linux": "linux"}.get(goos)
    if name is None:
        raise DownloadError(f"unsupported value for runtime.GOOS: {goos}")
    return name


def default_base_path(
    goos: Optional[str] = None,
    goarch: Optional[str] = None,
    getenv: Optional[Callable[[str], Optional[str]]] = None,
) -> str:
    """Return the default cache directory for the given platform and environment."""
    goos = goos if goos is not None else _current_goos()
    goarch = goarch if goarch is not None else _current_goarch()
    getenv = getenv if getenv is not None else os.environ.get
    uname_s, uname_m = uname_paths(goos, goarch)
    xdg_cache_home = getenv("XDG_CACHE_HOME") or ""
    if xdg_cache_home:
        return os.path.join(xdg_cache_home, "prototool", uname_s, uname_m)
    home = getenv("HOME") or ""
    if not home:
        raise DownloadError("HOME is not set")
    if uname_s == "Darwin":
        return os.path.join(home, "Library", "Caches", "prototool", uname_s, uname_m)
    if uname_s == "Linux":
        return os.path.join(home, ".cache", "prototool", uname_s, uname_m)
    raise DownloadError(f"invalid value for uname -s: {uname_s}")


class Downloader:
    """Downloads and caches a protobuf release holding protoc and the well-known types.

    Without a cache path, files go to ${XDG_CACHE_HOME}/prototool/$(uname -s)/$(uname -m),
    falling back to ~/Library/Caches on Darwin and ~/.cache on Linux.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        logger: Optional[logging.Logger] = None,
        cache_path: str = "",
        protoc_url: str = "",
    ) -> None:
        self.config = config if config is not None else Config()
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.cache_path = cache_path
        self.protoc_url = protoc_url
        self.protobuf_version = (
            self.config.compile.protobuf_version or DEFAULT_PROTOC_VERSION
        )
        self._lock = threading.Lock()
        self._cached_base_path = ""

    def download(self) -> str:
        """Download protobuf if needed and return the path to its artifacts."""
        cached = self._cached_base_path
        if cached:
            return cached
        return self._cache()

    def protoc_path(self) -> str:
        """Return the path to protoc, downloading first if needed."""
        return os.path.join(self.download(), "bin", "protoc")

    def well_known_types_include_path(self) -> str:
        """Return the include directory holding google/protobuf, downloading if needed."""
        return os.path.join(self.download(), "include")

    def delete(self) -> None:
        """Delete all downloaded artifacts. Not safe to run alongside other calls."""
        base_path = self._base_path_no_version()
        self._cached_base_path = ""
        self.logger.debug("deleting %s", base_path)
        shutil.rmtree(base_path, ignore_errors=True)

    def protoc_url_for(self, goos: str, goarch: str) -> str:
        """Return the URL of the protoc zip file for the given platform."""
        if self.protoc_url:
            return self.protoc_url
        _, uname_m = uname_paths(goos, goarch)
        os_name = protoc_os_name(goos)
        version = self.protobuf_version
        return (
            f"{_RELEASES_URL}/download/v{version}/"
            f"protoc-{version}-{os_name}-{uname_m}.zip"
        )

    def _cache(self) -> str:
        with self._lock:
            if self._cached_base_path:
                return self._cached_base_path
            base_path = self._base_path()
            try:
                self._check_downloaded(base_path)
            except DownloadError:
                self._download_into(base_path, _current_goos(), _current_goarch())
                self._check_downloaded(base_path)
                self.logger.debug("protobuf downloaded to %s", base_path)
            else:
                self.logger.debug("protobuf already downloaded at %s", base_path)
            self._cached_base_path = base_path
            return base_path

    def _check_downloaded(self, base_path: str) -> None:
        protoc = os.path.join(base_path, "bin", "protoc")
        try:
            completed = subprocess.run(
                [protoc, "--version"],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as err:
            raise DownloadError(str(err)) from err
        if completed.returncode != 0:
            raise DownloadError(
                f"{protoc} --version exited with status {completed.returncode}"
            )
        if self.protoc_url:
            # The version is unknown for a custom URL.
            return
        output = completed.stdout.decode("utf-8", errors="replace").strip()
        self.logger.debug("output from protoc --version: %s", output)
        expected = f"libprotoc {self.protobuf_version}"
        if output != expected:
            raise DownloadError(
                f"expected {expected} from protoc --version, got {output}"
            )

    def _download_into(self, base_path: str, goos: str, goarch: str) -> None:
        data = self._download_data(goos, goarch)
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as err:
            raise DownloadError(f"invalid protoc zip file: {err}") from err
        with archive:
            for info in archive.infolist():
                mode = (info.external_attr >> 16) & 0o7777
                self.logger.debug("found protobuf file in zip: %s (%o)", info.filename, mode)
                if info.is_dir():
                    continue
                write_path = os.path.join(base_path, info.filename)
                os.makedirs(os.path.dirname(write_path), mode=0o755, exist_ok=True)
                with archive.open(info) as source, open(write_path, "wb") as target:
                    shutil.copyfileobj(source, target)
                if mode:
                    os.chmod(write_path, mode)
                self.logger.debug("wrote protobuf file %s", write_path)

    def _download_data(self, goos: str, goarch: str) -> bytes:
        url = self.protoc_url_for(goos, goarch)
        if url.startswith("file://"):
            try:
                with open(url[len("file://"):], "rb") as f:
                    data = f.read()
            except OSError as err:
                raise DownloadError(str(err)) from err
        elif url.startswith(("http://", "https://")):
            data = self._fetch(url)
        else:
            raise DownloadError(
                f"unknown url, can only handle http, https, file: {url}"
            )
        self.logger.debug("downloaded protobuf zip file from %s", url)
        return data

    def _fetch(self, url: str) -> bytes:
        try:
            with urllib.request.urlopen(url) as response:
                status = getattr(response, "status", 200)
                if status != 200:
                    raise urllib.error.HTTPError(
                        url, status, f"status {status}", response.headers, None
                    )
                return response.read()
        except (urllib.error.URLError, OSError) as err:
            if not self.protoc_url:
                raise DownloadError(
                    f"error downloading {url}: {err}\n"
                    "Make sure GitHub Releases has a proper protoc zip file of the form "
                    f"protoc-VERSION-OS-ARCH.zip at {_RELEASES_URL}/v{self.protobuf_version}\n"
                    "Note that many micro versions do not have this, and no version "
                    "before 3.0.0-beta-2 has this"
                ) from err
            raise DownloadError(str(err)) from err

    def _base_path(self) -> str:
        return os.path.join(self._base_path_no_version(), self._version_part())

    def _base_path_no_version(self) -> str:
        if self.cache_path:
            base_path = os.path.normpath(os.path.abspath(self.cache_path))
        else:
            base_path = default_base_path()
        if not os.path.isabs(base_path):
            raise DownloadError(f"expected absolute path but was {base_path}")
        return os.path.join(base_path, "protobuf")

    def _version_part(self) -> str:
        if self.protoc_url:
            digest = hashlib.sha512(self.protoc_url.encode("utf-8")).digest()
            return base64.urlsafe_b64encode(digest).decode("ascii")
        return self.protobuf_version