"""
Preprocessor context for cross-cutting options.

This module defines the PreprocessorContext dataclass which holds options
that affect several stages of import resolution (logging, alias key
derivation, text substitution).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from cp_paths import DEFAULT_SOURCE_EXTENSIONS


class LogLevel(IntEnum):
    """Hierarchical logging levels for the contract preprocessor."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages (default)
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


@dataclass
class PreprocessorContext:
    """
    Holds cross-cutting options shared by the preprocessor, the ad-hoc resolver and the CLI.

    Attributes:
        log_rich_format:            If True, emit logs in rich format: may include log level, timestamps, etc.
        log_level:                  Current logging level.
        source_extensions:          Source file extensions stripped from the last path segment
                                    of an import location to form its alias key.
        replace_all_occurrences:    If True, every quoted occurrence of a resolved import location is
                                    rewritten; otherwise only the first one is (historical behavior).
    """
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING
    source_extensions: Tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
    replace_all_occurrences: bool = False

    @staticmethod
    def default() -> 'PreprocessorContext':
        """Create a PreprocessorContext with default settings."""
        return PreprocessorContext(log_level=LogLevel.WARNING)
