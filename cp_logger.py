"""
Logging utilities for the contract preprocessor.

This module provides logging functions that respect the PreprocessorContext
logging level and format.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from cp_context import PreprocessorContext, LogLevel


def log(context: PreprocessorContext, log_level: LogLevel, message: str) -> None:
    """
    Log a message if the context logging level admits it.

    Args:
        context:    The preprocessor context containing the logging level.
        log_level:  The level of the message to log.
        message:    The message to log.
    """
    if context is None:
        print("No context provided for logging.", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        return
    prefix = ""
    if context.log_rich_format:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        prefix = {
            LogLevel.ERROR: f"{timestamp} [ERROR] ",
            LogLevel.WARNING: f"{timestamp} [WARNING] ",
            LogLevel.INFO: f"{timestamp} [INFO] ",
            LogLevel.DEBUG: f"{timestamp} [DEBUG] ",
        }.get(log_level, "")
    if context.log_level >= log_level:
        print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: PreprocessorContext, message: str) -> None:
    """Log an error-level message."""
    log(context, LogLevel.ERROR, message)


def log_warning(context: PreprocessorContext, message: str) -> None:
    """Log a warning-level message."""
    log(context, LogLevel.WARNING, message)


def log_info(context: PreprocessorContext, message: str) -> None:
    """Log an info-level message."""
    log(context, LogLevel.INFO, message)


def log_debug(context: PreprocessorContext, message: str) -> None:
    """Log a debug-level message."""
    log(context, LogLevel.DEBUG, message)


def log_stage(context: PreprocessorContext, stage: str, subject: Optional[str] = None) -> None:
    """
    Log the start of a preprocessing stage.

    Args:
        context: The preprocessor context containing logging flags.
        stage:   The name of the stage (e.g., "Resolving imports").
        subject: Optional contract or file being processed.
    """
    if subject:
        log(context, LogLevel.INFO, f"{stage} for '{subject}'")
    else:
        log(context, LogLevel.INFO, f"{stage}...")
