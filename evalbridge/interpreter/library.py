# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The standard symbol library preloaded into every fresh interpreter.

A library is just an ordered set of importable module names. Loading it
binds each module into the namespace under its own top-level name, so
submitted source can call `math.sqrt(2)` or `json.dumps(...)` without an
import statement.
"""

import importlib
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from evalbridge.interpreter.exceptions import LibraryLoadError

DEFAULT_LIBRARY_MODULES: tuple[str, ...] = (
    "math",
    "json",
    "re",
    "random",
    "itertools",
    "functools",
    "collections",
    "string",
    "datetime",
    "time",
    "textwrap",
)


@dataclass(frozen=True)
class StandardLibrary:
    """An immutable list of modules to bind into each new namespace."""

    modules: tuple[str, ...] = DEFAULT_LIBRARY_MODULES

    def symbols(self) -> dict[str, Any]:
        """
        Import every module and return the bindings to install.

        Dotted names (`os.path`) are bound under their top-level package,
        the same way `import os.path` binds `os`.

        Raises:
            LibraryLoadError: If any module fails to import. The message is
                the importer's own error text.
        """
        bindings: dict[str, ModuleType] = {}
        for name in self.modules:
            try:
                importlib.import_module(name)
                top_level = name.split(".", 1)[0]
                bindings[top_level] = importlib.import_module(top_level)
            except Exception as err:
                raise LibraryLoadError(str(err)) from err
        return bindings
