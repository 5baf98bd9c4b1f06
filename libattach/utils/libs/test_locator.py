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
Tests for component origins and source locations.

Run with: python3 -m pytest test_locator.py
"""

import os
import tempfile
import unittest

from libattach.utils.libs.errors import UnknownComponentTypeError
from libattach.utils.libs.locator import (
    ComponentOrigin,
    ExtensionDirectoryCache,
    SourceLocator,
)


class TestExtensionDirectoryCache(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name
        os.makedirs(os.path.join(self.root, "com.example.Full"))
        os.makedirs(os.path.join(self.root, "com.example.pkg"))

    def tearDown(self):
        self._tmp.cleanup()

    def test_explicit_mapping_wins(self):
        cache = ExtensionDirectoryCache(self.root, {"com.example.Full": "/opt/ext"})
        self.assertEqual(cache.get("com.example.Full"), "/opt/ext")

    def test_full_type_name(self):
        cache = ExtensionDirectoryCache(self.root)
        self.assertEqual(cache.get("com.example.Full"), os.path.join(self.root, "com.example.Full"))

    def test_package_prefix(self):
        cache = ExtensionDirectoryCache(self.root)
        self.assertEqual(cache.get("com.example.pkg.Widget"), os.path.join(self.root, "com.example.pkg"))

    def test_unknown_is_cached(self):
        cache = ExtensionDirectoryCache(self.root)
        self.assertIsNone(cache.get("com.other.Thing"))
        os.makedirs(os.path.join(self.root, "com.other.Thing"))
        self.assertIsNone(cache.get("com.other.Thing"))
        self.assertFalse(cache.is_extension("com.other.Thing"))

    def test_no_root(self):
        self.assertIsNone(ExtensionDirectoryCache().get("com.example.Full"))


class TestSourceLocator(unittest.TestCase):
    def setUp(self):
        self.locator = SourceLocator(
            "/runtime",
            ["Camera"],
            ExtensionDirectoryCache(explicit_dirs={"com.example.Ext": "/ext/com.example"}),
        )

    def test_builtin_origin(self):
        self.assertEqual(self.locator.origin_for("Camera"), ComponentOrigin.built_in())

    def test_android_is_builtin(self):
        self.assertFalse(self.locator.origin_for("ANDROID").is_extension)

    def test_extension_origin(self):
        origin = self.locator.origin_for("com.example.Ext")
        self.assertTrue(origin.is_extension)
        self.assertEqual(origin.install_dir, "/ext/com.example")

    def test_unknown_type(self):
        with self.assertRaises(UnknownComponentTypeError) as ctx:
            self.locator.origin_for("Nope")
        self.assertEqual(ctx.exception.component_type, "Nope")

    def test_resolve_origins(self):
        origins = self.locator.resolve_origins(["Camera", "com.example.Ext"])
        self.assertEqual(set(origins), {"Camera", "com.example.Ext"})

    def test_archive_paths(self):
        builtin = ComponentOrigin.built_in()
        ext = ComponentOrigin.extension("/ext/com.example")
        self.assertEqual(
            self.locator.archive_path(builtin, "foo.aar"),
            os.path.join("/runtime", "files", "foo.aar"),
        )
        self.assertEqual(
            self.locator.archive_path(ext, "foo.aar"),
            os.path.join("/ext/com.example", "aars", "foo.aar"),
        )

    def test_native_paths(self):
        builtin = ComponentOrigin.built_in()
        ext = ComponentOrigin.extension("/ext/com.example")
        self.assertEqual(
            self.locator.native_path(builtin, "armeabi-v7a", "libfoo.so"),
            os.path.join("/runtime", "files", "armeabi-v7a", "libfoo.so"),
        )
        self.assertEqual(
            self.locator.native_path(ext, "x86", "libfoo.so"),
            os.path.join("/ext/com.example", "native", "x86", "libfoo.so"),
        )


if __name__ == "__main__":
    unittest.main()
