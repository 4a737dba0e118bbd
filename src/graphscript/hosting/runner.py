# -*- coding: utf-8 -*-
"""
Runner - Executes an entry method of a loaded unit and captures its output.

Standard output is a process-wide resource, so runs are serialized by a
single module-level lock held across redirect and restore. There is no
timeout: generated code that never returns blocks the caller.
"""
import inspect
import io
import threading
import traceback
from contextlib import redirect_stdout
from dataclasses import dataclass
from typing import Any, Optional

from loguru import logger

from src.core.config import CodegenSettings

from ..core.errors import ExecutionFault
from .compiler import LoadedUnit


_RUN_LOCK = threading.Lock()


@dataclass
class RunResult:
    """
    Outcome of run_unit.

    Attributes:
        success: True if the entry method returned normally
        output: Everything written to stdout during the call
        fault: What went wrong, when success is False
        return_value: Value returned by the entry method
    """
    success: bool
    output: str = ""
    fault: Optional[ExecutionFault] = None
    return_value: Any = None


def _fault(message: str) -> RunResult:
    logger.error(f"Run failed: {message}")
    return RunResult(False, "", ExecutionFault(message))


def run_unit(
    unit: LoadedUnit,
    entry_type_name: Optional[str] = None,
    entry_method_name: Optional[str] = None
) -> RunResult:
    """
    Instantiate the entry type and call its zero-argument entry method.

    Never raises for faults of the generated code.

    Args:
        unit: Loaded unit to run
        entry_type_name: Class to instantiate (CodegenSettings default if None)
        entry_method_name: Method to call (CodegenSettings default if None)

    Returns:
        RunResult with captured output or the fault
    """
    defaults = CodegenSettings()
    entry_type_name = entry_type_name or defaults.class_name
    entry_method_name = entry_method_name or defaults.method_name

    if not unit.is_loaded:
        return _fault(f"Unit '{unit.name}' has been unloaded")

    cls = unit.get_type(entry_type_name)
    if cls is None:
        return _fault(f"Type '{entry_type_name}' not found in unit '{unit.name}'")

    if not callable(getattr(cls, entry_method_name, None)):
        return _fault(f"Method '{entry_type_name}.{entry_method_name}' not found")

    buffer = io.StringIO()
    fault: Optional[ExecutionFault] = None
    return_value = None

    with _RUN_LOCK:
        with redirect_stdout(buffer):
            try:
                entry = getattr(cls(), entry_method_name)
                if _required_parameters(entry):
                    fault = ExecutionFault(
                        f"Method '{entry_type_name}.{entry_method_name}' requires arguments"
                    )
                else:
                    return_value = entry()
            except (Exception, SystemExit) as e:
                fault = ExecutionFault(
                    str(e),
                    type(e).__name__,
                    traceback.format_exc(),
                    e
                )

    output = buffer.getvalue()
    if fault is not None:
        logger.error(f"Run of '{unit.name}' faulted: {fault}")
        return RunResult(False, output, fault)

    logger.info(f"Ran '{unit.name}': {len(output)} chars of output")
    return RunResult(True, output, None, return_value)


def _required_parameters(func) -> int:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return 0
    return sum(
        1 for p in signature.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
    )
