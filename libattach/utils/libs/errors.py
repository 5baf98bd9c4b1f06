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
Errors raised by the library attachment stage.

Every error here is fatal for the stage. The resolver turns them into a
failed CliResult; nothing retries or rolls back.
"""


class LibraryAttachError(Exception):
    """Base exception of the library attachment stage"""

    pass


class UnknownComponentTypeError(LibraryAttachError):
    """A component type is neither built-in nor an installed extension"""

    def __init__(self, component_type: str):
        super().__init__(f"Unknown component type: {component_type}")
        self.component_type = component_type


class UnreadableArchiveError(LibraryAttachError):
    """An archive is missing, is not a zip file, or holds an unsafe entry"""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Unable to read archive {path}: {reason}")
        self.path = path
        self.reason = reason


class MissingIdentityError(LibraryAttachError):
    """An archive has no manifest, or its manifest declares no package"""

    def __init__(self, path: str):
        super().__init__(f"Unable to read packageName from: {path}")
        self.path = path


class AttachIOError(LibraryAttachError):
    """Wraps a filesystem failure while placing library files"""

    def __init__(self, message: str, cause: Exception = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause
