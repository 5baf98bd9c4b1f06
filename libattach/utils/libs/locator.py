#
# Copyright 2024 zhlinh and libattach Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""
Source locations of required libraries.

A component type is either built into the runtime, in which case its
libraries live in the runtime resource tree, or it is an installed
extension with its own directory. The origin of each type is resolved once
per run and then reused for every library the type needs.
"""

import os
from typing import Dict, Iterable, Optional

from libattach.utils.libs.constants import (
    ANDROID_COMPONENT_TYPE,
    EXT_AARS_DIR_NAME,
    EXT_NATIVE_DIR_NAME,
    RUNTIME_FILES_DIR,
)
from libattach.utils.libs.errors import UnknownComponentTypeError


class ComponentOrigin:
    """Where a component type's libraries come from"""

    BUILT_IN = "builtin"
    EXTENSION = "extension"

    def __init__(self, kind: str, install_dir: Optional[str] = None):
        self.kind = kind
        self.install_dir = install_dir

    @classmethod
    def built_in(cls):
        return cls(cls.BUILT_IN)

    @classmethod
    def extension(cls, install_dir: str):
        return cls(cls.EXTENSION, install_dir)

    @property
    def is_extension(self) -> bool:
        return self.kind == self.EXTENSION

    def __eq__(self, other):
        if not isinstance(other, ComponentOrigin):
            return NotImplemented
        return (self.kind, self.install_dir) == (other.kind, other.install_dir)

    def __hash__(self):
        return hash((self.kind, self.install_dir))

    def __repr__(self):
        if self.is_extension:
            return f"ComponentOrigin(extension, {self.install_dir})"
        return "ComponentOrigin(builtin)"


class ExtensionDirectoryCache:
    """
    Look up and cache the install directory of extension component types.

    An explicit mapping wins. Otherwise the directory is searched under
    extensions_root, first by the full type name and then by its package
    prefix, since one extension package may provide several types.
    """

    def __init__(
        self,
        extensions_root: Optional[str] = None,
        explicit_dirs: Optional[Dict[str, str]] = None,
    ):
        self.extensions_root = extensions_root
        self.explicit_dirs = dict(explicit_dirs or {})
        self._cache: Dict[str, Optional[str]] = {}

    def is_extension(self, component_type: str) -> bool:
        return self.get(component_type) is not None

    def get(self, component_type: str) -> Optional[str]:
        if component_type in self._cache:
            return self._cache[component_type]
        path = self._lookup(component_type)
        self._cache[component_type] = path
        return path

    def _lookup(self, component_type: str) -> Optional[str]:
        if component_type in self.explicit_dirs:
            return self.explicit_dirs[component_type]
        if not self.extensions_root:
            return None

        candidates = [component_type]
        if "." in component_type:
            candidates.append(component_type.rsplit(".", 1)[0])
        for name in candidates:
            path = os.path.join(self.extensions_root, name)
            if os.path.isdir(path):
                return path
        return None


class SourceLocator:
    """Map (component type, library name) to a file on disk"""

    def __init__(
        self,
        runtime_root: str,
        builtin_types: Iterable[str],
        extension_dirs: ExtensionDirectoryCache,
    ):
        """
        Initialize the locator.

        Args:
            runtime_root: Root of the runtime resource tree holding built-in libraries
            builtin_types: Component types that ship with the runtime
            extension_dirs: Lookup of extension install directories
        """
        self.runtime_root = runtime_root
        self.builtin_types = set(builtin_types)
        self.builtin_types.add(ANDROID_COMPONENT_TYPE)
        self.extension_dirs = extension_dirs

    def origin_for(self, component_type: str) -> ComponentOrigin:
        """
        Resolve the origin of a component type.

        Raises:
            UnknownComponentTypeError: If the type is neither built-in nor an extension
        """
        if component_type in self.builtin_types:
            return ComponentOrigin.built_in()
        install_dir = self.extension_dirs.get(component_type)
        if install_dir is not None:
            return ComponentOrigin.extension(install_dir)
        raise UnknownComponentTypeError(component_type)

    def resolve_origins(self, component_types: Iterable[str]) -> Dict[str, ComponentOrigin]:
        return {t: self.origin_for(t) for t in component_types}

    def archive_path(self, origin: ComponentOrigin, raw_name: str) -> str:
        if origin.is_extension:
            return os.path.join(origin.install_dir, EXT_AARS_DIR_NAME, raw_name)
        return os.path.join(self.runtime_root, RUNTIME_FILES_DIR, raw_name)

    def native_path(self, origin: ComponentOrigin, abi_dir: str, base_name: str) -> str:
        if origin.is_extension:
            return os.path.join(
                origin.install_dir, EXT_NATIVE_DIR_NAME, abi_dir, base_name
            )
        return os.path.join(self.runtime_root, RUNTIME_FILES_DIR, abi_dir, base_name)
