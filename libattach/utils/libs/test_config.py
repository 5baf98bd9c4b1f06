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
Tests for stage configuration loading.

Run with: python3 -m pytest test_config.py
"""

import os
import tempfile
import unittest
from unittest.mock import patch

from libattach.utils.libs.config import ConfigError, StageConfig, load_config_file

SAMPLE_CONFIG = """
[build]
dir = "build"
runtime_root = "${LIBATTACH_TEST_RUNTIME}"
verbose = true

[components]
builtin = ["Camera", "Camera2"]

[extensions]
root = "assets/external_comps"
dirs = { "com.example.Ext" = "ext/com.example" }

[android]
support_aars = ["appcompat.aar"]

[libs]
Camera = ["foo.aar", "bar.jar"]
Camera2 = ["foo.aar"]

[native_libs]
"com.example.Ext" = ["libfoo.so-v7a"]
"""


class TestStageConfig(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.config_path = os.path.join(self.tmp, "LIBATTACH.toml")
        with open(self.config_path, "w") as f:
            f.write(SAMPLE_CONFIG)

    def tearDown(self):
        self._tmp.cleanup()

    @patch.dict(os.environ, {"LIBATTACH_TEST_RUNTIME": "/opt/runtime"})
    def test_from_file(self):
        config = StageConfig.from_file(self.config_path)

        self.assertEqual(config.build_dir, os.path.join(self.tmp, "build"))
        self.assertEqual(config.runtime_root, "/opt/runtime")
        self.assertEqual(config.assets_dir, "")
        self.assertTrue(config.verbose)
        self.assertEqual(config.builtin_types, ["Camera", "Camera2"])
        self.assertEqual(config.extensions_root, os.path.join(self.tmp, "assets", "external_comps"))
        self.assertEqual(
            config.extension_dirs,
            {"com.example.Ext": os.path.join(self.tmp, "ext", "com.example")},
        )
        self.assertEqual(config.support_aars, ["appcompat.aar"])
        self.assertEqual(config.validate(), (True, ""))

    @patch.dict(os.environ, {"LIBATTACH_TEST_RUNTIME": "/opt/runtime"})
    def test_requirement_maps_are_fresh_sets(self):
        config = StageConfig.from_file(self.config_path)
        libs_needed = config.libs_needed()
        self.assertEqual(libs_needed, {"Camera": {"foo.aar", "bar.jar"}, "Camera2": {"foo.aar"}})
        libs_needed["Camera"].clear()
        self.assertEqual(config.libs_needed()["Camera"], {"foo.aar", "bar.jar"})
        self.assertEqual(config.native_libs_needed(), {"com.example.Ext": {"libfoo.so-v7a"}})

    @patch.dict(os.environ, {"LIBATTACH_TEST_RUNTIME": "/opt/runtime"})
    def test_create_locator(self):
        locator = StageConfig.from_file(self.config_path).create_locator()
        self.assertFalse(locator.origin_for("Camera").is_extension)
        self.assertEqual(
            locator.origin_for("com.example.Ext").install_dir,
            os.path.join(self.tmp, "ext", "com.example"),
        )

    def test_unset_variable_left_as_is(self):
        with patch.dict(os.environ, {}, clear=True):
            config = StageConfig({"build": {"dir": "/b", "runtime_root": "$NOPE_NOT_SET"}})
        self.assertEqual(config.runtime_root, os.path.join(os.getcwd(), "$NOPE_NOT_SET"))

    def test_missing_build_dir(self):
        is_valid, message = StageConfig({}).validate()
        self.assertFalse(is_valid)
        self.assertIn("dir", message)

    def test_runtime_root_required_for_builtin_types(self):
        config = StageConfig(
            {"build": {"dir": "/b"}, "components": {"builtin": ["Camera"]}, "libs": {"Camera": ["foo.aar"]}}
        )
        is_valid, message = config.validate()
        self.assertFalse(is_valid)
        self.assertIn("runtime_root", message)

    def test_libs_must_be_lists(self):
        config = StageConfig({"build": {"dir": "/b"}, "libs": {"Ext": "foo.aar"}})
        is_valid, message = config.validate()
        self.assertFalse(is_valid)
        self.assertIn("[libs]", message)

    def test_summary(self):
        config = StageConfig({"build": {"dir": "/b"}, "libs": {"Camera": ["a.aar", "b.aar"]}})
        summary = config.get_config_summary()
        self.assertIn("Build Dir: /b", summary)
        self.assertIn("Libraries: 2", summary)

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config_file(os.path.join(self.tmp, "missing.toml"))

    def test_invalid_toml(self):
        path = os.path.join(self.tmp, "broken.toml")
        with open(path, "w") as f:
            f.write("[build\ndir = ")
        with self.assertRaises(ConfigError):
            StageConfig.from_file(path)


if __name__ == "__main__":
    unittest.main()
