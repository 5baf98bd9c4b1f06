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
Library attachment stage.

Resolves every packaged archive (.aar) and native library a build needs,
explodes each unique archive exactly once, merges archive assets into the
build's asset directory and copies native libraries into libs/<abi>/.

Archives are deduplicated twice: by the raw name that was requested, so a
library needed by several component types is handled once, and by the
package name the archive declares, so two differently named files with the
same content are never attached twice. The archive pass must run
sequentially; identity dedup depends on the order archives are seen.

Usage:
    resolver = LibraryResolver(build_dir, locator, verbose=True)
    result = resolver.execute(libs_needed, native_libs_needed)
    if result.is_failure():
        print(result.get_error())
"""

import os
from typing import Dict, Iterable, List, Optional, Set

from libattach.utils.context.result import CliResult
from libattach.utils.libs.archive import (
    ExplodedLibraries,
    explode_aar,
    read_aar_package_name,
)
from libattach.utils.libs.assets import merge_aar_assets
from libattach.utils.libs.constants import (
    ANDROID_COMPONENT_TYPE,
    ASSETS_FOLDER,
    EXPLODED_AARS_DIR_NAME,
    GENERATED_DIR_NAME,
    GENERATED_SRC_DIR_NAME,
    LIBS_DIR_NAME,
)
from libattach.utils.libs.errors import (
    AttachIOError,
    LibraryAttachError,
    MissingIdentityError,
)
from libattach.utils.libs.locator import ComponentOrigin, SourceLocator
from libattach.utils.libs.native import NativeLibraryPlacer
from libattach.utils.libs.requirement import (
    LibraryRequirement,
    drain_requirement,
    iter_archive_requirements,
    iter_native_requirements,
)


def ensure_dir(path: str) -> str:
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise AttachIOError(f"Failed to create directory {path}", e) from e
    return path


class LibraryResolver:
    """Attach archive and native libraries to one build"""

    def __init__(
        self,
        build_dir: str,
        locator: SourceLocator,
        merged_asset_dir: Optional[str] = None,
        support_aars: Optional[Iterable[str]] = None,
        verbose: bool = False,
    ):
        """
        Initialize the resolver.

        Args:
            build_dir: Base build directory; exploded-aars/, generated/src/ and
                libs/ are created below it
            locator: Source locator for built-in and extension libraries
            merged_asset_dir: Shared asset directory (default: build_dir/assets)
            support_aars: Archives every app needs, attached as built-ins
            verbose: Print progress for every library
        """
        self.build_dir = build_dir
        self.locator = locator
        self.merged_asset_dir = merged_asset_dir or os.path.join(build_dir, ASSETS_FOLDER)
        self.support_aars = list(support_aars or [])
        self.verbose = verbose

        self.exploded_base_dir = os.path.join(build_dir, EXPLODED_AARS_DIR_NAME)
        self.gen_src_dir = os.path.join(build_dir, GENERATED_DIR_NAME, GENERATED_SRC_DIR_NAME)
        self.libs_dir = os.path.join(build_dir, LIBS_DIR_NAME)

        # Per-run state, reset by attach_aar_libraries()
        self.processed_names: Set[str] = set()
        self.attached_identities: Set[str] = set()
        self.exploded_libs: Optional[ExplodedLibraries] = None
        self.asset_collisions: List[str] = []
        self._origins: Dict[str, ComponentOrigin] = {}

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def origin_for(self, component_type: str) -> ComponentOrigin:
        """Resolve a component type's origin once and reuse it for the run"""
        if component_type not in self._origins:
            self._origins[component_type] = self.locator.origin_for(component_type)
        return self._origins[component_type]

    def _attach_one(self, requirement: LibraryRequirement):
        origin = self.origin_for(requirement.component_type)
        source = self.locator.archive_path(origin, requirement.raw_name)

        package_name = read_aar_package_name(source)
        if package_name is None:
            raise MissingIdentityError(source)

        if package_name in self.attached_identities:
            self._log(
                f"   ⏭️  Skipping {requirement.raw_name}: "
                f"{package_name} is already attached"
            )
            self.processed_names.add(requirement.raw_name)
            return

        self._log(f"   📦 Attaching {requirement.raw_name} ({package_name})")
        lib = explode_aar(source, package_name, self.exploded_base_dir)
        self.exploded_libs.add(lib)
        overwritten = merge_aar_assets(source, self.merged_asset_dir)
        for relative in overwritten:
            self._log(f"   ⚠️  Warning: asset {relative} overwritten by {requirement.raw_name}")
        self.asset_collisions.extend(overwritten)
        self.processed_names.add(requirement.raw_name)
        self.attached_identities.add(package_name)

    def attach_aar_libraries(self, libs_needed: Dict[str, Set[str]]) -> CliResult:
        """
        Explode and register every .aar requirement, draining it from libs_needed.

        Non-archive entries of libs_needed are left for later stages.

        Args:
            libs_needed: Mapping of component type to required library names;
                mutated in place

        Returns:
            CliResult: ExplodedLibraries on success, the LibraryAttachError on failure
        """
        self.processed_names = set()
        self.attached_identities = set()
        self.asset_collisions = []
        self._origins = {}

        if self.support_aars:
            libs_needed.setdefault(ANDROID_COMPONENT_TYPE, set()).update(self.support_aars)

        try:
            ensure_dir(self.exploded_base_dir)
            ensure_dir(self.gen_src_dir)
            ensure_dir(self.merged_asset_dir)
            self.exploded_libs = ExplodedLibraries(self.gen_src_dir)

            for requirement in iter_archive_requirements(libs_needed):
                if requirement.raw_name not in self.processed_names:
                    self._attach_one(requirement)
                drain_requirement(libs_needed, requirement)
        except LibraryAttachError as e:
            print(f"   ❌ Error while attaching AAR libraries: {e}")
            return CliResult.failure(e)

        self._log(f"   ✅ Attached {len(self.exploded_libs)} AAR libraries")
        return CliResult.success(self.exploded_libs)

    def attach_native_libraries(self, native_libs_needed: Dict[str, Set[str]]) -> CliResult:
        """
        Copy every native requirement into libs/<abi>/ of the build.

        Returns:
            CliResult: list of ResolvedNativeLibrary on success, the
                LibraryAttachError on failure
        """
        placed = []
        try:
            placer = NativeLibraryPlacer(self.libs_dir, self.locator)
            for requirement in iter_native_requirements(native_libs_needed):
                origin = self.origin_for(requirement.component_type)
                resolved = placer.place(requirement, origin)
                self._log(f"   🔧 {requirement.raw_name} -> {resolved.target_path}")
                placed.append(resolved)
        except LibraryAttachError as e:
            print(f"   ❌ Error while processing native code: {e}")
            return CliResult.failure(e)

        self._log(f"   ✅ Placed {len(placed)} native libraries")
        return CliResult.success(placed)

    def execute(
        self,
        libs_needed: Dict[str, Set[str]],
        native_libs_needed: Optional[Dict[str, Set[str]]] = None,
    ) -> CliResult:
        """
        Run the archive pass, then the native pass.

        Stops at the first failure. Files already placed stay on disk.

        Returns:
            CliResult: dict with "exploded_libs", "native_libs" and
                "asset_collisions" on success
        """
        aar_result = self.attach_aar_libraries(libs_needed)
        if aar_result.is_failure():
            return aar_result

        native_result = self.attach_native_libraries(native_libs_needed or {})
        if native_result.is_failure():
            return native_result

        return CliResult.success(
            {
                "exploded_libs": aar_result.get_value(),
                "native_libs": native_result.get_value(),
                "asset_collisions": list(self.asset_collisions),
            }
        )
