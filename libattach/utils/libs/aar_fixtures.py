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
Helpers that build small AAR archives for tests.
"""

import os
import zipfile
from typing import Dict, Iterable, Optional, Union

MANIFEST_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android"
    package="{package}" >

    <uses-sdk android:minSdkVersion="21" />

</manifest>
"""


def make_manifest(package: str) -> str:
    return MANIFEST_TEMPLATE.format(package=package)


def make_aar(
    path: str,
    package: Optional[str] = "com.example.foo",
    manifest_name: str = "AndroidManifest.xml",
    manifest: Optional[str] = None,
    entries: Optional[Dict[str, Union[str, bytes]]] = None,
    dirs: Iterable[str] = (),
) -> str:
    """
    Write an AAR at path.

    Args:
        path: Output file
        package: Package declared in the generated manifest; None for no manifest
        manifest_name: Entry name of the manifest
        manifest: Raw manifest text, overrides package
        entries: Extra file entries, name -> content
        dirs: Extra directory entries (names ending with "/")
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        if manifest is None and package is not None:
            manifest = make_manifest(package)
        if manifest is not None:
            zf.writestr(manifest_name, manifest)
        for name in dirs:
            zf.writestr(zipfile.ZipInfo(name), b"")
        for name, content in (entries or {}).items():
            zf.writestr(name, content)
    return path
