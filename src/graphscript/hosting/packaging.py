# -*- coding: utf-8 -*-
"""
Packaging - Out-of-process native executable builds.

The compiler hands a BuildRequest record to a Packager and gets a
BuildResult back; it never drives the external process itself.
PyInstallerPackager is the stock implementation: it writes the source and
a build manifest to a scratch directory, runs PyInstaller, and moves the
produced binary (or, for one-folder builds, the whole folder) to the
destination.
"""
import json
import os
import shutil
import subprocess
import sys
import tempfile
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from loguru import logger

from src.core.config import PackagingSettings

from ..core.errors import PackagingError

if TYPE_CHECKING:
    from .compiler import CompilationResult


_OUTPUT_TAIL = 4000


@dataclass
class BuildRequest:
    """
    Everything the packaging tool needs.

    Attributes:
        source: Module source with a main() entry point
        manifest: Build metadata written next to the source
        destination: Directory the executable ends up in
        unit_name: Executable name (without extension)
        windowed: Build without a console window
    """
    source: str
    manifest: Dict[str, Any]
    destination: str
    unit_name: str
    windowed: bool = False


@dataclass
class BuildResult:
    """Structured reply from a Packager."""
    ok: bool
    artifact_path: Optional[str] = None
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    message: str = ""
    command: List[str] = field(default_factory=list)
    duration_ms: float = 0.0


@dataclass
class PackagingOutcome:
    """
    Result of GraphCompiler.package.

    Attributes:
        compilation: The in-process compilation (always attempted first)
        build: Packager reply, None if the packager never answered
        error: Set when packaging failed and the fallback was used
        artifact_path: The executable, or the in-process artifact on fallback
    """
    compilation: 'CompilationResult'
    build: Optional[BuildResult]
    error: Optional[PackagingError]
    artifact_path: Optional[str]

    @property
    def packaged(self) -> bool:
        return self.error is None


class Packager(ABC):
    """Builds a native executable from a BuildRequest."""

    @abstractmethod
    def package(self, request: BuildRequest) -> BuildResult:
        """
        Run the build.

        Returns:
            BuildResult; failures are reported through ok=False

        Raises:
            PackagingError: If the build could not even be attempted
        """


def _run_subprocess(cmd: List[str], *, cwd: Optional[str] = None, timeout_sec: float = 300.0) -> Dict[str, Any]:
    started = time.time()
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout_sec,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        result = {
            "ok": proc.returncode == 0,
            "returncode": proc.returncode,
            "stdout": proc.stdout[-_OUTPUT_TAIL:],
            "stderr": proc.stderr[-_OUTPUT_TAIL:],
        }
    except subprocess.TimeoutExpired as exc:
        result = {
            "ok": False,
            "returncode": None,
            "stdout": (exc.stdout or "")[-_OUTPUT_TAIL:] if isinstance(exc.stdout, str) else "",
            "stderr": (exc.stderr or "")[-_OUTPUT_TAIL:] if isinstance(exc.stderr, str) else "",
            "timeout": True,
        }
    result["duration_ms"] = round((time.time() - started) * 1000, 2)
    return result


class PyInstallerPackager(Packager):
    """
    Packager backed by the PyInstaller command line.

    Args:
        settings: Tool name, onefile flag, timeout and scratch retention
    """

    def __init__(self, settings: Optional[PackagingSettings] = None):
        self.settings = settings or PackagingSettings()

    def build_command(self, request: BuildRequest, tool: str, scratch: Path, source_path: Path) -> List[str]:
        command = [tool, "--noconfirm", "--clean"]
        command.append("--onefile" if self.settings.onefile else "--onedir")
        if request.windowed:
            command.append("--windowed")
        command.extend([
            "--name", request.unit_name,
            "--distpath", str(scratch / "dist"),
            "--workpath", str(scratch / "build"),
            "--specpath", str(scratch / "spec"),
            str(source_path),
        ])
        return command

    def package(self, request: BuildRequest) -> BuildResult:
        tool = shutil.which(self.settings.tool)
        if tool is None:
            return BuildResult(ok=False, message=f"tool_missing: {self.settings.tool}")

        scratch = Path(tempfile.mkdtemp(prefix="graphscript_build_"))
        try:
            source_path = scratch / f"{request.unit_name}.py"
            source_path.write_text(request.source, encoding="utf-8")
            (scratch / "build_manifest.json").write_text(
                json.dumps(request.manifest, indent=2), encoding="utf-8"
            )

            command = self.build_command(request, tool, scratch, source_path)
            logger.info(f"Packaging '{request.unit_name}' with {self.settings.tool}")
            run = _run_subprocess(command, cwd=str(scratch), timeout_sec=self.settings.timeout_sec)

            artifact = None
            if run["ok"]:
                artifact = self._relocate(scratch / "dist", request.unit_name, request.destination)

            message = ""
            if run.get("timeout"):
                message = f"{self.settings.tool} timed out after {self.settings.timeout_sec}s"
            elif run["ok"] and artifact is None:
                message = "Build finished but no executable was produced"

            return BuildResult(
                ok=bool(run["ok"]) and artifact is not None,
                artifact_path=artifact,
                returncode=run["returncode"],
                stdout=run["stdout"],
                stderr=run["stderr"],
                message=message,
                command=command,
                duration_ms=run["duration_ms"],
            )
        except OSError as e:
            raise PackagingError(f"Could not prepare build for '{request.unit_name}': {e}") from e
        finally:
            if self.settings.keep_scratch:
                logger.debug(f"Keeping build scratch directory {scratch}")
            else:
                shutil.rmtree(scratch, ignore_errors=True)

    @staticmethod
    def _relocate(dist: Path, name: str, destination: str) -> Optional[str]:
        """
        Move the build output out of the scratch directory.

        A one-file build is a single binary. A one-folder build is the
        binary plus the libraries beside it, so the whole folder is copied.

        Returns:
            Path of the executable under destination, or None if the
            build produced none
        """
        binary = f"{name}.exe" if sys.platform == "win32" else name

        if (dist / binary).is_file():
            os.makedirs(destination, exist_ok=True)
            artifact = os.path.join(destination, binary)
            shutil.copy2(dist / binary, artifact)
            return artifact

        if (dist / name / binary).is_file():
            folder = os.path.join(destination, name)
            shutil.copytree(dist / name, folder, dirs_exist_ok=True)
            return os.path.join(folder, binary)

        return None
