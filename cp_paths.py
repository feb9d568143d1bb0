#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import posixpath
from dataclasses import dataclass
from typing import Tuple

DEFAULT_SOURCE_EXTENSIONS: Tuple[str, ...] = (".cdc", ".src")


@dataclass(frozen=True)
class ImportPaths:
    """
    Path rules for contract imports.

    - normalize: resolve an import location against the directory of the importing
      contract, purely lexically (no filesystem access, no symlinks).
    - alias_key: last segment of the location without its source extension; used only
      to look the location up in an alias table.

    Paths always use '/' separators, whatever the host platform.
    """
    source_extensions: Tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS

    def clean(self, path: str) -> str:
        """
        Collapse '.' and '..' segments and duplicate separators, e.g.
        'contracts/./lib/../Token.cdc' -> 'contracts/Token.cdc'.
        """
        return posixpath.normpath(path)

    def normalize(self, base_path: str, location: str) -> str:
        """
        Resolve `location` relative to the directory of `base_path`.

        An absolute location is only cleaned.
        """
        return self.clean(posixpath.join(posixpath.dirname(base_path), location))

    def alias_key(self, location: str) -> str:
        """
        Convert an import location like './lib/Token.cdc' to the alias key 'Token'.
        """
        name = posixpath.basename(location.rstrip("/")) or location
        for ext in self.source_extensions:
            if name.endswith(ext) and len(name) > len(ext):
                return name[: -len(ext)]
        return name
