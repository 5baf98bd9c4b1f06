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
Packaged library (AAR) handling.

Reads the namespace an archive declares in its embedded manifest, explodes
the archive into the build tree, and keeps the registry of exploded
libraries that the compile stages consume.
"""

import glob
import io
import os
import re
import zipfile
from typing import Dict, Iterator, List, Optional

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError, iterparse

from libattach.utils.libs.constants import (
    ANDROID_MANIFEST_NAME,
    ASSETS_FOLDER,
    MANIFEST_PACKAGE_ATTR,
)
from libattach.utils.libs.errors import AttachIOError, UnreadableArchiveError

PACKAGE_PATTERN = re.compile(MANIFEST_PACKAGE_ATTR + r'="([^"]*)"')


def find_manifest_entry(zf: zipfile.ZipFile) -> Optional[zipfile.ZipInfo]:
    """
    Find the manifest entry of an archive.

    An exact match on the root manifest wins; otherwise the first file
    entry whose path ends with the manifest name is used.
    """
    try:
        return zf.getinfo(ANDROID_MANIFEST_NAME)
    except KeyError:
        pass
    for info in zf.infolist():
        if not info.is_dir() and info.filename.endswith(ANDROID_MANIFEST_NAME):
            return info
    return None


def _read_root_package(data: bytes) -> Optional[str]:
    # Only the root element is parsed; the rest of the document is never read
    for _event, elem in iterparse(io.BytesIO(data), events=("start",)):
        return elem.get(MANIFEST_PACKAGE_ATTR)
    return None


def _scan_package(data: bytes) -> Optional[str]:
    text = data.decode("utf-8", errors="replace")
    for line in text.splitlines():
        match = PACKAGE_PATTERN.search(line)
        if match:
            return match.group(1)
    return None


def read_aar_package_name(aar_path: str) -> Optional[str]:
    """
    Read the package name an archive declares in its AndroidManifest.xml.

    Args:
        aar_path: Path to the .aar file

    Returns:
        str: The package name, or None if the archive has no manifest or
            the manifest declares no (or a blank) package

    Raises:
        UnreadableArchiveError: If the file is missing or is not a zip archive
    """
    if not os.path.isfile(aar_path):
        raise UnreadableArchiveError(aar_path, "file not found")
    try:
        with zipfile.ZipFile(aar_path, "r") as zf:
            entry = find_manifest_entry(zf)
            if entry is None:
                return None
            data = zf.read(entry)
    except zipfile.BadZipFile as e:
        raise UnreadableArchiveError(aar_path, f"not a zip file ({e})") from e
    except OSError as e:
        raise UnreadableArchiveError(aar_path, str(e)) from e

    try:
        package = _read_root_package(data)
    except ParseError:
        # Not well-formed XML, fall back to a plain text scan
        package = _scan_package(data)
    except DefusedXmlException as e:
        raise UnreadableArchiveError(aar_path, f"unsafe manifest ({e})") from e

    if package is None or not package.strip():
        return None
    return package.strip()


class ExplodedLibrary:
    """
    One archive unpacked into the build tree.

    The exploded directory follows the AAR layout; accessors return None
    (or an empty list) for parts the archive does not ship.
    """

    def __init__(self, identity: str, source_path: str, exploded_path: str):
        self.identity = identity
        self.source_path = source_path
        self.exploded_path = exploded_path

    def _existing(self, *parts) -> Optional[str]:
        path = os.path.join(self.exploded_path, *parts)
        return path if os.path.exists(path) else None

    @property
    def manifest(self) -> Optional[str]:
        return self._existing(ANDROID_MANIFEST_NAME)

    @property
    def classes_jar(self) -> Optional[str]:
        return self._existing("classes.jar")

    @property
    def res_dir(self) -> Optional[str]:
        return self._existing("res")

    @property
    def r_txt(self) -> Optional[str]:
        return self._existing("R.txt")

    @property
    def assets_dir(self) -> Optional[str]:
        return self._existing(ASSETS_FOLDER)

    @property
    def jni_dir(self) -> Optional[str]:
        return self._existing("jni")

    @property
    def proguard_txt(self) -> Optional[str]:
        return self._existing("proguard.txt")

    @property
    def libs_jars(self) -> List[str]:
        return sorted(glob.glob(os.path.join(self.exploded_path, "libs", "*.jar")))

    def has_resources(self) -> bool:
        res = self.res_dir
        return res is not None and bool(os.listdir(res))

    def __repr__(self):
        return f"ExplodedLibrary(identity={self.identity}, path={self.exploded_path})"


def explode_aar(aar_path: str, identity: str, exploded_base_dir: str) -> ExplodedLibrary:
    """
    Unpack an archive into <exploded_base_dir>/<identity>/.

    Raises:
        UnreadableArchiveError: If the archive cannot be opened or the
            package name cannot be used as a directory name
        AttachIOError: If writing the exploded files fails
    """
    if identity in (".", "..") or "/" in identity or "\\" in identity:
        raise UnreadableArchiveError(aar_path, f"invalid package name: {identity}")
    target_dir = os.path.join(exploded_base_dir, identity)
    try:
        with zipfile.ZipFile(aar_path, "r") as zf:
            os.makedirs(target_dir, exist_ok=True)
            # extractall drops absolute prefixes and ".." segments from names
            zf.extractall(target_dir)
    except zipfile.BadZipFile as e:
        raise UnreadableArchiveError(aar_path, f"not a zip file ({e})") from e
    except OSError as e:
        raise AttachIOError(f"Failed to explode {aar_path} into {target_dir}", e) from e
    return ExplodedLibrary(identity, aar_path, target_dir)


class ExplodedLibraries:
    """Registry of exploded archives, one entry per identity"""

    def __init__(self, gen_src_dir: str):
        """
        Args:
            gen_src_dir: Directory where later stages generate R classes
        """
        self.gen_src_dir = gen_src_dir
        self._libs: Dict[str, ExplodedLibrary] = {}

    def add(self, lib: ExplodedLibrary) -> bool:
        """Register a library; returns False if its identity is already present"""
        if lib.identity in self._libs:
            return False
        self._libs[lib.identity] = lib
        return True

    def get(self, identity: str) -> Optional[ExplodedLibrary]:
        return self._libs.get(identity)

    def identities(self) -> List[str]:
        return list(self._libs.keys())

    def get_class_jars(self) -> List[str]:
        jars = []
        for lib in self._libs.values():
            if lib.classes_jar:
                jars.append(lib.classes_jar)
            jars.extend(lib.libs_jars)
        return jars

    def get_resource_dirs(self) -> List[str]:
        return [lib.res_dir for lib in self._libs.values() if lib.has_resources()]

    def __contains__(self, identity):
        return identity in self._libs

    def __iter__(self) -> Iterator[ExplodedLibrary]:
        return iter(self._libs.values())

    def __len__(self):
        return len(self._libs)


def describe_aar(aar_path: str) -> Dict[str, object]:
    """
    Summarize the contents of an archive without unpacking it.

    Returns:
        dict with keys:
            package: declared package name or None
            manifest: manifest entry name or None
            assets: asset paths relative to assets/
            jni: mapping of ABI directory to native library names
            has_classes_jar: whether classes.jar is present
            has_resources: whether any res/ file is present

    Raises:
        UnreadableArchiveError: If the file is missing or is not a zip archive
    """
    package = read_aar_package_name(aar_path)
    info = {
        "package": package,
        "manifest": None,
        "assets": [],
        "jni": {},
        "has_classes_jar": False,
        "has_resources": False,
    }
    with zipfile.ZipFile(aar_path, "r") as zf:
        entry = find_manifest_entry(zf)
        if entry is not None:
            info["manifest"] = entry.filename
        for item in zf.infolist():
            name = item.filename
            if item.is_dir():
                continue
            if name.startswith(ASSETS_FOLDER + "/"):
                info["assets"].append(name[len(ASSETS_FOLDER) + 1:])
            elif name.startswith("jni/"):
                parts = name.split("/")
                if len(parts) == 3:
                    info["jni"].setdefault(parts[1], []).append(parts[2])
            elif name == "classes.jar":
                info["has_classes_jar"] = True
            elif name.startswith("res/"):
                info["has_resources"] = True
    return info
