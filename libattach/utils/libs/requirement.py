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
Library requirements and native ABI classification.
"""

from enum import Enum
from typing import Dict, Iterator, List, Set, Tuple

from libattach.utils.libs.constants import (
    AAR_SUFFIX,
    ARM64_V8A_DIR_NAME,
    ARM64_V8A_SUFFIX,
    ARMEABI_DIR_NAME,
    ARMEABI_V7A_DIR_NAME,
    ARMEABI_V7A_SUFFIX,
    X86_64_DIR_NAME,
    X86_64_SUFFIX,
    X86_DIR_NAME,
    X86_SUFFIX,
)


class LibraryKind(Enum):
    ARCHIVE = "archive"
    NATIVE = "native"


class Architecture(Enum):
    """Target ABI of a native library: (directory name, raw-name suffix)"""

    GENERIC = (ARMEABI_DIR_NAME, "")
    ARMEABI_V7A = (ARMEABI_V7A_DIR_NAME, ARMEABI_V7A_SUFFIX)
    ARM64_V8A = (ARM64_V8A_DIR_NAME, ARM64_V8A_SUFFIX)
    X86_64 = (X86_64_DIR_NAME, X86_64_SUFFIX)
    X86 = (X86_DIR_NAME, X86_SUFFIX)

    @property
    def dir_name(self) -> str:
        return self.value[0]

    @property
    def suffix(self) -> str:
        return self.value[1]


# Checked in order; the first matching suffix wins, GENERIC is the fallback
ARCHITECTURE_SUFFIX_ORDER = [
    Architecture.ARMEABI_V7A,
    Architecture.ARM64_V8A,
    Architecture.X86_64,
    Architecture.X86,
]


def classify_native_library(raw_name: str) -> Tuple[Architecture, str]:
    """
    Classify a raw native requirement by its ABI suffix.

    Args:
        raw_name: Requirement string, e.g. "libfoo.so-v7a"

    Returns:
        Tuple of (architecture, file name with the suffix stripped)

    Example:
        classify_native_library("libfoo.so-v8a")  # (ARM64_V8A, "libfoo.so")
        classify_native_library("libfoo.so")      # (GENERIC, "libfoo.so")
    """
    for arch in ARCHITECTURE_SUFFIX_ORDER:
        if raw_name.endswith(arch.suffix):
            return arch, raw_name[: -len(arch.suffix)]
    return Architecture.GENERIC, raw_name


def is_archive_library(raw_name: str) -> bool:
    return raw_name.endswith(AAR_SUFFIX)


class LibraryRequirement:
    """A single library requested by a component type"""

    def __init__(self, component_type: str, raw_name: str, kind: LibraryKind):
        self.component_type = component_type
        self.raw_name = raw_name
        self.kind = kind

    def __eq__(self, other):
        if not isinstance(other, LibraryRequirement):
            return NotImplemented
        return (self.component_type, self.raw_name, self.kind) == (
            other.component_type,
            other.raw_name,
            other.kind,
        )

    def __hash__(self):
        return hash((self.component_type, self.raw_name, self.kind))

    def __repr__(self):
        return (
            f"LibraryRequirement(type={self.component_type}, "
            f"name={self.raw_name}, kind={self.kind.value})"
        )


class ResolvedNativeLibrary:
    """Where one native requirement is copied to; lives for one copy only"""

    def __init__(self, architecture: Architecture, base_name: str, target_path: str):
        self.architecture = architecture
        self.base_name = base_name
        self.target_path = target_path

    def __repr__(self):
        return (
            f"ResolvedNativeLibrary(arch={self.architecture.dir_name}, "
            f"name={self.base_name}, target={self.target_path})"
        )


def iter_archive_requirements(
    libs_needed: Dict[str, Set[str]]
) -> Iterator[LibraryRequirement]:
    """
    Yield the archive requirements of every component type.

    Iterates over snapshots so callers may drain the owning sets while
    walking them.
    """
    for component_type in list(libs_needed.keys()):
        for raw_name in sorted(libs_needed[component_type]):
            if is_archive_library(raw_name):
                yield LibraryRequirement(component_type, raw_name, LibraryKind.ARCHIVE)


def iter_native_requirements(
    native_libs_needed: Dict[str, Set[str]]
) -> Iterator[LibraryRequirement]:
    for component_type in list(native_libs_needed.keys()):
        for raw_name in sorted(native_libs_needed[component_type]):
            yield LibraryRequirement(component_type, raw_name, LibraryKind.NATIVE)


def drain_requirement(
    libs_needed: Dict[str, Set[str]], requirement: LibraryRequirement
):
    """Remove a satisfied requirement from its owning set"""
    libs_needed.get(requirement.component_type, set()).discard(requirement.raw_name)


def to_requirement_map(raw: Dict[str, List[str]]) -> Dict[str, Set[str]]:
    """Convert a {type: [names]} mapping (e.g. from TOML) into mutable sets"""
    return {component_type: set(names) for component_type, names in raw.items()}
