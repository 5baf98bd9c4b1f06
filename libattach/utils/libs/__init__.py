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
Library attachment for Android app builds.

This module resolves packaged archives (.aar) and native libraries required
by component types and places them into the build tree.
"""

from .archive import ExplodedLibraries, ExplodedLibrary, read_aar_package_name
from .config import ConfigError, StageConfig
from .errors import (
    AttachIOError,
    LibraryAttachError,
    MissingIdentityError,
    UnknownComponentTypeError,
    UnreadableArchiveError,
)
from .locator import ComponentOrigin, ExtensionDirectoryCache, SourceLocator
from .requirement import Architecture, LibraryKind, LibraryRequirement
from .resolver import LibraryResolver

__all__ = [
    'Architecture',
    'AttachIOError',
    'ComponentOrigin',
    'ConfigError',
    'ExplodedLibraries',
    'ExplodedLibrary',
    'ExtensionDirectoryCache',
    'LibraryAttachError',
    'LibraryKind',
    'LibraryRequirement',
    'LibraryResolver',
    'MissingIdentityError',
    'SourceLocator',
    'StageConfig',
    'UnknownComponentTypeError',
    'UnreadableArchiveError',
    'read_aar_package_name',
]
