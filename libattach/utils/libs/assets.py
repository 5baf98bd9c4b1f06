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
Merge the assets/ subtree of packaged archives into one asset directory.

Archives are merged in the order they are attached. When two archives ship
the same relative path the later one overwrites the earlier one; the
overwritten paths are returned so the caller can report them.
"""

import os
import shutil
import zipfile
from typing import List

from libattach.utils.libs.constants import ASSETS_PREFIX
from libattach.utils.libs.errors import AttachIOError, UnreadableArchiveError


def _safe_target(dest_dir: str, relative: str, aar_path: str) -> str:
    target = os.path.normpath(os.path.join(dest_dir, relative))
    root = os.path.normpath(dest_dir)
    if target != root and not target.startswith(root + os.sep):
        raise UnreadableArchiveError(aar_path, f"asset entry escapes destination: {relative}")
    return target


def merge_aar_assets(aar_path: str, merged_asset_dir: str) -> List[str]:
    """
    Copy every assets/ entry of an archive into merged_asset_dir.

    Args:
        aar_path: Path to the .aar file
        merged_asset_dir: Shared asset directory of the build

    Returns:
        List of relative paths that already existed and were overwritten

    Raises:
        UnreadableArchiveError: If the archive cannot be opened or holds an
            entry pointing outside merged_asset_dir
        AttachIOError: If writing an asset fails
    """
    overwritten = []
    try:
        with zipfile.ZipFile(aar_path, "r") as zf:
            for info in zf.infolist():
                if not info.filename.startswith(ASSETS_PREFIX):
                    continue
                relative = info.filename[len(ASSETS_PREFIX):]
                if not relative:
                    continue
                target = _safe_target(merged_asset_dir, relative, aar_path)
                if info.is_dir():
                    os.makedirs(target, exist_ok=True)
                    continue

                os.makedirs(os.path.dirname(target), exist_ok=True)
                if os.path.isfile(target):
                    overwritten.append(relative)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
    except zipfile.BadZipFile as e:
        raise UnreadableArchiveError(aar_path, f"not a zip file ({e})") from e
    except OSError as e:
        raise AttachIOError(f"Failed to merge assets of {aar_path}", e) from e
    return overwritten
