from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from nowquery.clauses import clause_items
from nowquery.config import LoadedConfig, load_config, resolve_config_path
from nowquery.exceptions import NowQueryError, OperatorConfigError, QueryBuildError
from nowquery.operators import OperatorTable

from .errors import CLIError
from .results import CommandMeta, CommandResult, ErrorInfo

OutputFormat = Literal["table", "json"]


@dataclass
class CLIContext:
    output: OutputFormat
    quiet: bool
    verbosity: int
    config_file: str | None
    log_file: Path | None
    enable_log_file: bool

    _loaded_config: LoadedConfig | None = None

    @property
    def config_path(self) -> Path:
        return resolve_config_path(self.config_file)

    def load_config(self) -> LoadedConfig:
        if self._loaded_config is None:
            self._loaded_config = load_config(self.config_path)
        return self._loaded_config

    def operators(self) -> OperatorTable:
        return self.load_config().operators


def exit_code_for_exception(exc: Exception) -> int:
    if isinstance(exc, CLIError):
        return exc.exit_code
    if isinstance(exc, (QueryBuildError, OperatorConfigError)):
        return 2
    return 1


def error_info_for_exception(exc: Exception) -> ErrorInfo:
    if isinstance(exc, CLIError):
        return ErrorInfo(
            type=exc.error_type, message=exc.message, hint=exc.hint, details=exc.details
        )
    if isinstance(exc, QueryBuildError):
        details: dict[str, Any] = {"error": exc.__class__.__name__}
        if exc.index is not None:
            details["index"] = exc.index
        if isinstance(exc.clause, str):
            details["clause"] = exc.clause
        elif exc.clause is not None:
            details["clause"] = [str(item) for item in clause_items(exc.clause)]
        return ErrorInfo(type="validation_error", message=exc.message, details=details)
    if isinstance(exc, OperatorConfigError):
        return ErrorInfo(type="config_error", message=str(exc))
    if isinstance(exc, NowQueryError):
        return ErrorInfo(type=exc.__class__.__name__, message=str(exc))
    return ErrorInfo(type="internal_error", message=f"{exc.__class__.__name__}: {exc}")


def build_result(
    *,
    ok: bool,
    command: str,
    started_at: float,
    data: Any | None,
    warnings: list[str],
    config_path: Path | None = None,
    error: ErrorInfo | None = None,
) -> CommandResult:
    duration_ms = int(max(0.0, (time.time() - started_at) * 1000))
    meta = CommandMeta(
        duration_ms=duration_ms,
        config_path=str(config_path) if config_path is not None else None,
    )
    return CommandResult(
        ok=ok,
        command=command,
        data=data,
        warnings=warnings,
        meta=meta,
        error=error,
    )
