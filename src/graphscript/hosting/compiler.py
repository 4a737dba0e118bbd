# -*- coding: utf-8 -*-
"""
Graph Compiler - Compiles generated source into an isolated, unloadable unit.

The unit is a private module object built from the code object returned by
compile(). It is never registered in sys.modules, so any number of units
with the same name can coexist and unloading one never affects another.
The source is registered in linecache under a unique pseudo-filename so
tracebacks from generated code show the generated lines.

Example:
    compiler = GraphCompiler()
    result = compiler.compile(source, references=["math"])
    if result.success:
        with result.unit as unit:
            print(run_unit(unit).output)
    else:
        for diagnostic in result.diagnostics:
            print(diagnostic)
"""
import importlib
import importlib.util
import linecache
import marshal
import os
import sys
import types
import warnings
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union
from uuid import uuid4

from loguru import logger

from src.core.config import BuildSettings

from ..codegen.translator import OutputKind
from ..core.errors import CompilationError, PackagingError
from .diagnostics import Diagnostic, Severity, SourceLocation
from .packaging import BuildRequest, BuildResult, Packager, PackagingOutcome, PyInstallerPackager


class LoadedUnit:
    """
    Owned handle to one compiled module.

    Use as a context manager to guarantee release:

        with result.unit as unit:
            run_unit(unit)

    Attributes:
        name: Unit name given at compile time
        filename: Pseudo-filename the code was compiled under
        source: Generated source
    """

    def __init__(self, name: str, module: types.ModuleType, filename: str, source: str):
        self.name = name
        self.filename = filename
        self.source = source
        self._module: Optional[types.ModuleType] = module

    @property
    def is_loaded(self) -> bool:
        return self._module is not None

    @property
    def module(self) -> Optional[types.ModuleType]:
        return self._module

    def get_type(self, type_name: str) -> Optional[type]:
        """Look up a class defined by the unit (None if absent or unloaded)."""
        if self._module is None:
            return None
        candidate = getattr(self._module, type_name, None)
        return candidate if isinstance(candidate, type) else None

    def create_instance(self, type_name: str):
        cls = self.get_type(type_name)
        return cls() if cls is not None else None

    def unload(self) -> None:
        """Release the module namespace and source cache entry. Idempotent."""
        if self._module is None:
            return
        self._module.__dict__.clear()
        self._module = None
        linecache.cache.pop(self.filename, None)
        logger.debug(f"Unloaded unit '{self.name}'")

    def __enter__(self) -> 'LoadedUnit':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unload()

    def __repr__(self) -> str:
        state = "loaded" if self.is_loaded else "unloaded"
        return f"<LoadedUnit '{self.name}' {state}>"


@dataclass
class CompilationResult:
    """
    Outcome of GraphCompiler.compile.

    Attributes:
        success: False if any error diagnostic was produced
        unit: Loaded unit on success, None otherwise
        diagnostics: Errors and warnings in source order
        source: The compiled source
        artifact_path: Persisted .py/.pyw file, if written
        symbols_path: Persisted .pyc file, if written
    """
    success: bool
    unit: Optional[LoadedUnit]
    diagnostics: List[Diagnostic] = field(default_factory=list)
    source: str = ""
    artifact_path: Optional[str] = None
    symbols_path: Optional[str] = None

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    def raise_for_errors(self) -> None:
        """
        Raises:
            CompilationError: If the compilation failed
        """
        if not self.success:
            raise CompilationError(self.errors)

    def unload(self) -> None:
        if self.unit is not None:
            self.unit.unload()


class GraphCompiler:
    """
    Compiles generated source and optionally persists artifacts.

    compile() never raises for problems in the source; they come back as
    diagnostics.
    """

    def __init__(self, settings: Optional[BuildSettings] = None):
        self.settings = settings or BuildSettings()

    # =========================================================================
    # Compile
    # =========================================================================

    def compile(
        self,
        source: str,
        references: Iterable[str] = (),
        output_kind: Union[OutputKind, str] = OutputKind.LIBRARY,
        unit_name: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> CompilationResult:
        """
        Compile source into a loaded unit.

        Args:
            source: Python source text
            references: Modules the source may import; each must be importable
            output_kind: Decides the persisted file extension
            unit_name: Module name (settings.unit_name if None)
            output_dir: Where to persist artifacts (settings.output_dir if None)

        Returns:
            CompilationResult with the unit or the diagnostics
        """
        output_kind = OutputKind(output_kind)
        unit_name = unit_name or self.settings.unit_name
        output_dir = output_dir or self.settings.output_dir
        filename = f"<graphscript:{unit_name}:{uuid4().hex[:8]}>"

        preloaded, diagnostics = self._import_references(references)
        code, compile_diagnostics = self._compile_source(source, filename)
        diagnostics.extend(compile_diagnostics)

        if code is None or any(d.is_error for d in diagnostics):
            logger.error(
                f"Compilation of '{unit_name}' failed with "
                f"{sum(d.is_error for d in diagnostics)} error(s)"
            )
            return CompilationResult(False, None, diagnostics, source)

        module = types.ModuleType(unit_name)
        module.__file__ = filename
        module.__dict__.update(preloaded)
        linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)

        try:
            exec(code, module.__dict__)
        except (Exception, SystemExit) as e:
            linecache.cache.pop(filename, None)
            module.__dict__.clear()
            diagnostics.append(Diagnostic(
                Severity.ERROR,
                f"Loading failed: {type(e).__name__}: {e}",
                self._traceback_location(e, filename)
            ))
            logger.error(f"Loading '{unit_name}' failed: {e}")
            return CompilationResult(False, None, diagnostics, source)

        unit = LoadedUnit(unit_name, module, filename, source)
        result = CompilationResult(True, unit, diagnostics, source)

        if output_dir and self.settings.write_artifacts:
            result.artifact_path, result.symbols_path = self._persist(
                source, code, unit_name, output_dir, output_kind
            )

        logger.info(f"Compiled unit '{unit_name}' ({len(result.warnings)} warnings)")
        return result

    def _import_references(self, references: Iterable[str]) -> Tuple[dict, List[Diagnostic]]:
        preloaded = {}
        diagnostics = []
        for name in references:
            try:
                importlib.import_module(name)
            except Exception as e:
                diagnostics.append(Diagnostic(
                    Severity.ERROR, f"Reference '{name}' could not be imported: {e}"
                ))
                continue
            top = name.split(".")[0]
            preloaded[top] = sys.modules[top]
        return preloaded, diagnostics

    @staticmethod
    def _compile_source(source: str, filename: str):
        diagnostics: List[Diagnostic] = []
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", SyntaxWarning)
            try:
                code = compile(source, filename, "exec", dont_inherit=True)
            except SyntaxError as e:
                location = SourceLocation(e.lineno or 0, max((e.offset or 1) - 1, 0))
                diagnostics.append(Diagnostic(Severity.ERROR, e.msg or str(e), location))
                code = None
            except ValueError as e:
                # e.g. source containing null bytes
                diagnostics.append(Diagnostic(Severity.ERROR, str(e)))
                code = None

        warning_diagnostics = [
            Diagnostic(Severity.WARNING, str(w.message), SourceLocation(w.lineno or 0))
            for w in caught
            if issubclass(w.category, SyntaxWarning)
        ]
        return code, warning_diagnostics + diagnostics

    @staticmethod
    def _traceback_location(exc: BaseException, filename: str) -> Optional[SourceLocation]:
        tb = exc.__traceback__
        line = None
        while tb is not None:
            if tb.tb_frame.f_code.co_filename == filename:
                line = tb.tb_lineno
            tb = tb.tb_next
        return SourceLocation(line) if line else None

    def _persist(
        self,
        source: str,
        code: types.CodeType,
        unit_name: str,
        output_dir: str,
        output_kind: OutputKind
    ) -> Tuple[Optional[str], Optional[str]]:
        """Write <unit>.py (.pyw for windowed) and <unit>.pyc. Best-effort."""
        ext = ".pyw" if output_kind == OutputKind.WINDOWED else ".py"
        source_path = os.path.join(output_dir, f"{unit_name}{ext}")
        bytecode_path = os.path.join(output_dir, f"{unit_name}.pyc")
        try:
            os.makedirs(output_dir, exist_ok=True)
            with open(source_path, "w", encoding="utf-8") as f:
                f.write(source)
            with open(bytecode_path, "wb") as f:
                # Unchecked header: magic, flags, mtime, size
                f.write(importlib.util.MAGIC_NUMBER)
                f.write((0).to_bytes(4, "little"))
                f.write((0).to_bytes(4, "little"))
                f.write((len(source.encode("utf-8")) & 0xFFFFFFFF).to_bytes(4, "little"))
                f.write(marshal.dumps(code))
        except OSError as e:
            logger.warning(f"Could not persist artifacts for '{unit_name}' to {output_dir}: {e}")
            return None, None

        logger.debug(f"Persisted {source_path} and {bytecode_path}")
        return source_path, bytecode_path

    # =========================================================================
    # Packaging
    # =========================================================================

    def package(
        self,
        source: str,
        references: Iterable[str] = (),
        output_kind: Union[OutputKind, str] = OutputKind.CONSOLE,
        unit_name: Optional[str] = None,
        output_dir: Optional[str] = None,
        packager: Optional[Packager] = None
    ) -> PackagingOutcome:
        """
        Compile, persist, then build a native executable out of process.

        A failed build falls back to the persisted in-process artifact and
        reports a PackagingError in the outcome. Never raises.

        Args:
            source: Python source with a main() entry point
            references: Modules the source imports
            output_kind: CONSOLE or WINDOWED
            unit_name: Executable and module name
            output_dir: Destination directory
            packager: Build collaborator (PyInstallerPackager if None)

        Returns:
            PackagingOutcome
        """
        output_kind = OutputKind(output_kind)
        references = list(references)
        unit_name = unit_name or self.settings.unit_name
        output_dir = output_dir or self.settings.output_dir or os.getcwd()

        result = self.compile(source, references, output_kind, unit_name, output_dir)
        if not result.success:
            return PackagingOutcome(
                result, None, PackagingError("Compilation failed; nothing to package"), None
            )

        request = BuildRequest(
            source=source,
            manifest={
                "unit_name": unit_name,
                "output_kind": output_kind.value,
                "references": references,
                "python": ".".join(str(p) for p in sys.version_info[:3]),
            },
            destination=output_dir,
            unit_name=unit_name,
            windowed=output_kind == OutputKind.WINDOWED,
        )

        packager = packager or PyInstallerPackager()
        build: Optional[BuildResult] = None
        error: Optional[PackagingError] = None
        try:
            build = packager.package(request)
        except PackagingError as e:
            error = e
        except OSError as e:
            error = PackagingError(f"Packaging tool could not run: {e}")

        if build is not None and not build.ok:
            error = PackagingError(
                build.message or f"Packaging failed (exit code {build.returncode})",
                build.returncode,
                build.stderr
            )
        elif build is not None and not (build.artifact_path and os.path.exists(build.artifact_path)):
            error = PackagingError("Packaging reported success but produced no artifact")

        if error is not None:
            logger.warning(
                f"Packaging '{unit_name}' failed, falling back to {result.artifact_path}: {error}"
            )
            return PackagingOutcome(result, build, error, result.artifact_path)

        logger.info(f"Packaged '{unit_name}' -> {build.artifact_path}")
        return PackagingOutcome(result, build, None, build.artifact_path)
