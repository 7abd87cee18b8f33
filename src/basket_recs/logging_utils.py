# logging_utils.py
"""
Shared structured logging utilities for the basket recommendation layer.

Log format (one line per record):
<RunId>|<Date>|<Time>|<Level>|<File:Line>|<Module.Func>|<ModulePurpose>|
<InvokingFunc>|<InvokingFuncPurpose>|<Detail>|<NextStep>|<Resolution>|<END>

Modules call get_logger() and pass optional context via `extra`:
    logger.info(
        "Fetched %d rules",
        n,
        extra={
            "invoking_func": "retrieve",
            "invoking_purpose": "Pull rules for one seed item",
            "next_step": "Decode consequent sets",
            "resolution": "",
        },
    )

Scripts that want to name their own module purpose use log_info / log_error.
"""

from __future__ import annotations

import datetime
import inspect
import logging
import uuid
from typing import Dict, Optional

LOG_RUN_ID: str = uuid.uuid4().hex[:8]
# Alias for scripts that use RUN_ID
RUN_ID: str = LOG_RUN_ID

_script_logger = logging.getLogger("basket_recs.scripts")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that emits a single '|' separated line following the template
    in the module docstring.
    """

    # High-level purposes by module name
    MODULE_PURPOSES: Dict[str, str] = {
        "config": "Load environment configuration and create the Supabase client",
        "rule_store": "Fetch association rule rows from Supabase rule tables",
        "top_selector": "Fetch the most popular seed items from Supabase",
        "decode": "Decode stored consequent sets into item ids",
        "registry": "Track which rule tables each mining method reads from",
        "retriever": "Collect unique consequents of one seed item's rules",
        "aggregator": "Union rule consequents across the top seed items",
        "extension": "Augment primary results with the extension rule table",
        "cross_method": "Fuse recommendations from every mining method",
        "sampler": "Randomly truncate recommendation sets for diversity",
        "recommender": "Public recommendation API over precomputed rule tables",
        "recommend_run": "Command-line runner for rule based recommendations",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        """Format log record into structured pipe-delimited format."""
        dt = datetime.datetime.fromtimestamp(record.created)
        date_str = dt.strftime("%Y-%m-%d")
        time_str = dt.strftime("%H:%M:%S")

        run_id = getattr(record, "run_id", RUN_ID)

        level = record.levelname
        code_location = f"{record.filename}:{record.lineno}"
        func_name = record.funcName
        module_name = record.module
        module_purpose = getattr(record, "module_purpose", "") or self.MODULE_PURPOSES.get(module_name, "")

        invoking_func = getattr(record, "invoking_func", "")
        invoking_purpose = getattr(record, "invoking_purpose", "")
        next_step = getattr(record, "next_step", "")
        resolution = getattr(record, "resolution", "")

        detail = record.getMessage()
        if record.exc_info and record.exc_info[1] is not None:
            detail = f"{detail} | EXC={record.exc_info[1]!r}"

        return (
            f"{run_id}|{date_str}|{time_str}|{level}|{code_location}|"
            f"{module_name}.{func_name}|{module_purpose}|"
            f"{invoking_func}|{invoking_purpose}|"
            f"{detail}|{next_step}|{resolution}|<END>"
        )


def init_logging(level: int = logging.INFO) -> None:
    """
    Initialize the root logger once with StructuredFormatter.

    Modules call get_logger() instead of logging.basicConfig() so the
    configuration stays in one place.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured (REPL, notebooks, pytest)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured with structured formatting."""
    init_logging()
    return logging.getLogger(name)


def _caller_name() -> str:
    frame = inspect.currentframe()
    # _caller_name <- log_* <- caller
    caller = frame.f_back.f_back if frame and frame.f_back else None
    return caller.f_code.co_name if caller is not None else "<unknown>"


def log_info(
    message: str,
    *,
    module_purpose: str,
    invoking_function: str = "",
    invoking_purpose: str = "",
    next_step: str = "",
    resolution: str = "",
) -> None:
    init_logging()
    _script_logger.info(
        message,
        extra={
            "module_purpose": module_purpose,
            "invoking_func": invoking_function or _caller_name(),
            "invoking_purpose": invoking_purpose,
            "next_step": next_step,
            "resolution": resolution,
        },
        stacklevel=2,
    )


def log_error(
    message: str,
    *,
    module_purpose: str,
    invoking_function: str = "",
    invoking_purpose: str = "",
    next_step: str = "",
    resolution: str = "",
    exc: Optional[BaseException] = None,
) -> None:
    init_logging()
    _script_logger.error(
        message,
        extra={
            "module_purpose": module_purpose,
            "invoking_func": invoking_function or _caller_name(),
            "invoking_purpose": invoking_purpose,
            "next_step": next_step,
            "resolution": resolution,
        },
        exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
        stacklevel=2,
    )
