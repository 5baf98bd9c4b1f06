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
Stage configuration handler.

Reads the library attachment configuration from LIBATTACH.toml:

    [build]
    dir = "build"
    runtime_root = "${RUNTIME_HOME}"
    assets_dir = "build/assets"      # optional
    verbose = true                   # optional

    [components]
    builtin = ["Camera", "Camera2"]

    [extensions]
    root = "assets/external_comps"   # optional
    dirs = { "com.example.Ext" = "ext/com.example" }

    [android]
    support_aars = ["appcompat.aar"]

    [libs]
    Camera = ["foo.aar", "bar.jar"]

    [native_libs]
    "com.example.Ext" = ["libfoo.so-v7a"]
"""

import os
import re
import sys
from typing import Any, Dict, Optional, Set

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from libattach.utils.libs.constants import CONFIG_FILE_NAME
from libattach.utils.libs.errors import LibraryAttachError
from libattach.utils.libs.locator import ExtensionDirectoryCache, SourceLocator
from libattach.utils.libs.requirement import to_requirement_map


class ConfigError(LibraryAttachError):
    """Exception raised for invalid or unreadable stage configuration"""

    pass


def load_config_file(config_path: str) -> Dict[str, Any]:
    """
    Load a TOML configuration file.

    Raises:
        ConfigError: If the file is missing or is not valid TOML
    """
    if not os.path.isfile(config_path):
        raise ConfigError(f"{CONFIG_FILE_NAME} not found at {config_path}")
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Error reading {config_path}: {e}") from e


class StageConfig:
    """Handle library attachment configuration."""

    def __init__(self, config: Dict[str, Any], base_dir: Optional[str] = None):
        """
        Initialize stage configuration.

        Args:
            config: Configuration dictionary from LIBATTACH.toml
            base_dir: Directory relative paths are resolved against
                (default: current working directory)
        """
        self.raw_config = config
        self.base_dir = base_dir or os.getcwd()

        build = config.get("build", {})
        self.build_dir = self._resolve_path(build.get("dir", ""))
        self.runtime_root = self._resolve_path(build.get("runtime_root", ""))
        self.assets_dir = self._resolve_path(build.get("assets_dir", ""))
        self.verbose = bool(build.get("verbose", False))

        self.builtin_types = list(config.get("components", {}).get("builtin", []))

        extensions = config.get("extensions", {})
        self.extensions_root = self._resolve_path(extensions.get("root", ""))
        self.extension_dirs = {
            component_type: self._resolve_path(path)
            for component_type, path in extensions.get("dirs", {}).items()
        }

        self.support_aars = list(config.get("android", {}).get("support_aars", []))
        self.libs = config.get("libs", {})
        self.native_libs = config.get("native_libs", {})

    @classmethod
    def from_file(cls, config_path: str) -> "StageConfig":
        config_path = os.path.abspath(config_path)
        return cls(load_config_file(config_path), os.path.dirname(config_path))

    def _expand_env(self, value: str) -> str:
        """
        Expand environment variables in configuration values.

        Supports ${VAR_NAME} and $VAR_NAME syntax.
        """
        if not isinstance(value, str):
            return value

        # Pattern for ${VAR_NAME}
        pattern1 = re.compile(r'\$\{([^}]+)\}')
        value = pattern1.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)

        # Pattern for $VAR_NAME
        pattern2 = re.compile(r'\$([A-Za-z_][A-Za-z0-9_]*)')
        value = pattern2.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)

        return value

    def _resolve_path(self, value: str) -> str:
        value = self._expand_env(value)
        if not value:
            return ""
        value = os.path.expanduser(value)
        if not os.path.isabs(value):
            value = os.path.join(self.base_dir, value)
        return os.path.normpath(value)

    def libs_needed(self) -> Dict[str, Set[str]]:
        """Fresh mutable copy of the archive/other library requirements"""
        return to_requirement_map(self.libs)

    def native_libs_needed(self) -> Dict[str, Set[str]]:
        return to_requirement_map(self.native_libs)

    def create_locator(self) -> SourceLocator:
        extension_dirs = ExtensionDirectoryCache(
            extensions_root=self.extensions_root or None,
            explicit_dirs=self.extension_dirs,
        )
        return SourceLocator(self.runtime_root, self.builtin_types, extension_dirs)

    def validate(self) -> tuple[bool, str]:
        """
        Validate the configuration.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not self.build_dir:
            return False, "[build] requires 'dir' to be specified"

        needs_runtime = bool(self.support_aars) or any(
            component_type in self.builtin_types
            for component_type in list(self.libs) + list(self.native_libs)
        )
        if needs_runtime and not self.runtime_root:
            return False, "[build] requires 'runtime_root' for built-in libraries"

        for section in ("libs", "native_libs"):
            for component_type, names in self.raw_config.get(section, {}).items():
                if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                    return False, f"[{section}] {component_type} must be a list of names"

        return True, ""

    def get_config_summary(self) -> str:
        """Get a summary of the configuration for display."""
        lines = []
        lines.append(f"  Build Dir: {self.build_dir}")
        lines.append(f"  Runtime Root: {self.runtime_root or 'Not configured'}")
        if self.assets_dir:
            lines.append(f"  Assets Dir: {self.assets_dir}")
        lines.append(f"  Built-in Types: {len(self.builtin_types)}")
        if self.extensions_root:
            lines.append(f"  Extensions Root: {self.extensions_root}")
        lines.append(f"  Extension Dirs: {len(self.extension_dirs)}")
        lines.append(f"  Support AARs: {len(self.support_aars)}")
        lines.append(f"  Libraries: {sum(len(v) for v in self.libs.values())}")
        lines.append(f"  Native Libraries: {sum(len(v) for v in self.native_libs.values())}")
        return "\n".join(lines)
