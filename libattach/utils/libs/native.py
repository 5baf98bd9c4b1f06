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
Native library (.so) placement.

Each requirement is classified by its ABI suffix and copied into
libs/<abi>/ of the build. Libraries shipped by an extension go one level
deeper, into libs/<abi>/external_comps/, so they never collide with the
built-in ones.
"""

import os
import shutil
from typing import Dict, Set, Tuple

from libattach.utils.libs.constants import EXT_COMPS_DIR_NAME
from libattach.utils.libs.errors import AttachIOError
from libattach.utils.libs.locator import ComponentOrigin, SourceLocator
from libattach.utils.libs.requirement import (
    Architecture,
    LibraryRequirement,
    ResolvedNativeLibrary,
    classify_native_library,
)


class NativeLibraryPlacer:
    """Copy native libraries into the per-ABI directories of a build"""

    def __init__(self, libs_dir: str, locator: SourceLocator):
        """
        Initialize the placer and create every ABI directory.

        Args:
            libs_dir: The build's libs/ directory
            locator: Source locator for built-in and extension libraries
        """
        self.libs_dir = libs_dir
        self.locator = locator
        self.arch_dirs: Dict[Architecture, str] = {}
        for arch in Architecture:
            path = os.path.join(libs_dir, arch.dir_name)
            try:
                os.makedirs(path, exist_ok=True)
            except OSError as e:
                raise AttachIOError(f"Failed to create {path}", e) from e
            self.arch_dirs[arch] = path
        # (source, target) pairs already copied in this run
        self._copied: Set[Tuple[str, str]] = set()

    def target_dir(self, arch: Architecture, origin: ComponentOrigin) -> str:
        target = self.arch_dirs[arch]
        if origin.is_extension:
            target = os.path.join(target, EXT_COMPS_DIR_NAME)
        return target

    def resolve(
        self, requirement: LibraryRequirement, origin: ComponentOrigin
    ) -> Tuple[str, ResolvedNativeLibrary]:
        """
        Work out where a native requirement comes from and where it goes.

        Returns:
            Tuple of (source path, resolved library)
        """
        arch, base_name = classify_native_library(requirement.raw_name)
        source = self.locator.native_path(origin, arch.dir_name, base_name)
        target = os.path.join(self.target_dir(arch, origin), base_name)
        return source, ResolvedNativeLibrary(arch, base_name, target)

    def place(
        self, requirement: LibraryRequirement, origin: ComponentOrigin
    ) -> ResolvedNativeLibrary:
        """
        Copy one native library into place.

        Raises:
            AttachIOError: If the source is missing or the copy fails
        """
        source, resolved = self.resolve(requirement, origin)
        key = (source, resolved.target_path)
        if key in self._copied:
            return resolved
        try:
            os.makedirs(os.path.dirname(resolved.target_path), exist_ok=True)
            shutil.copyfile(source, resolved.target_path)
        except OSError as e:
            raise AttachIOError(
                f"Failed to copy native library {requirement.raw_name} "
                f"for {requirement.component_type}",
                e,
            ) from e
        self._copied.add(key)
        return resolved

