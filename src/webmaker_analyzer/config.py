from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_RESULT_DIR = "WMReportResult"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_TEMP_PREFIX = "webmaker_analyzer_"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class AnalyzerSettings:
    """
    Run-level options.

    Values come from the environment (and a ``.env`` file when present);
    command-line flags override them through ``with_overrides``.
    """

    result_dir: Path = Path(DEFAULT_RESULT_DIR)
    log_level: str = DEFAULT_LOG_LEVEL
    temp_prefix: str = DEFAULT_TEMP_PREFIX
    generate_report: bool = True

    def with_overrides(self, **changes: object) -> "AnalyzerSettings":
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AnalyzerSettings:
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    report_flag = environ.get("WM_REPORT", "").strip().lower()
    return AnalyzerSettings(
        result_dir=Path(environ.get("WM_RESULT_DIR") or DEFAULT_RESULT_DIR),
        log_level=(environ.get("WM_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        temp_prefix=environ.get("WM_TEMP_PREFIX") or DEFAULT_TEMP_PREFIX,
        generate_report=report_flag not in _FALSE_VALUES,
    )
