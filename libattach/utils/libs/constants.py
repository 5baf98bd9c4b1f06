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
Directory names and file-name conventions shared between the library
attachment stage and the packaging stage.

Changing any value here changes the layout the packager reads, so both
sides must be updated together.
"""

# Build sub-directories
EXPLODED_AARS_DIR_NAME = "exploded-aars"
GENERATED_DIR_NAME = "generated"
GENERATED_SRC_DIR_NAME = "src"
LIBS_DIR_NAME = "libs"
ASSETS_FOLDER = "assets"

# Native ABI directories under libs/
ARMEABI_DIR_NAME = "armeabi"
ARMEABI_V7A_DIR_NAME = "armeabi-v7a"
ARM64_V8A_DIR_NAME = "arm64-v8a"
X86_64_DIR_NAME = "x86_64"
X86_DIR_NAME = "x86"

# Raw native requirement suffixes, e.g. "libfoo.so-v7a"
ARMEABI_V7A_SUFFIX = "-v7a"
ARM64_V8A_SUFFIX = "-v8a"
X86_64_SUFFIX = "-x8a"
X86_SUFFIX = "-x86"

# Extension-provided natives are nested under libs/<abi>/external_comps/
EXT_COMPS_DIR_NAME = "external_comps"

# Layout of the runtime resource tree and of an installed extension
RUNTIME_FILES_DIR = "files"
EXT_AARS_DIR_NAME = "aars"
EXT_NATIVE_DIR_NAME = "native"

# Component type that carries the support archives every app needs
ANDROID_COMPONENT_TYPE = "ANDROID"

AAR_SUFFIX = ".aar"
ANDROID_MANIFEST_NAME = "AndroidManifest.xml"
MANIFEST_PACKAGE_ATTR = "package"
ASSETS_PREFIX = ASSETS_FOLDER + "/"

# Default project configuration file
CONFIG_FILE_NAME = "LIBATTACH.toml"
