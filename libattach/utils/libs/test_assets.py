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
Tests for merging AAR assets.

Run with: python3 -m pytest test_assets.py
"""

import os
import tempfile
import unittest

from libattach.utils.libs.aar_fixtures import make_aar
from libattach.utils.libs.assets import merge_aar_assets
from libattach.utils.libs.errors import UnreadableArchiveError


class TestMergeAarAssets(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.dest = os.path.join(self.tmp, "assets")
        os.makedirs(self.dest)

    def tearDown(self):
        self._tmp.cleanup()

    def read(self, *parts):
        with open(os.path.join(self.dest, *parts), "rb") as f:
            return f.read()

    def test_assets_copied_with_prefix_stripped(self):
        payload = bytes(range(256)) * 4
        path = make_aar(
            os.path.join(self.tmp, "foo.aar"),
            entries={
                "assets/model.bin": payload,
                "assets/fonts/a.ttf": b"font",
                "classes.jar": b"classes",
                "res/values/values.xml": "<resources/>",
            },
        )
        overwritten = merge_aar_assets(path, self.dest)

        self.assertEqual(overwritten, [])
        self.assertEqual(self.read("model.bin"), payload)
        self.assertEqual(self.read("fonts", "a.ttf"), b"font")
        self.assertEqual(sorted(os.listdir(self.dest)), ["fonts", "model.bin"])

    def test_directory_entries_create_directories(self):
        path = make_aar(
            os.path.join(self.tmp, "foo.aar"),
            dirs=["assets/", "assets/empty/", "assets/deep/er/"],
        )
        merge_aar_assets(path, self.dest)
        self.assertTrue(os.path.isdir(os.path.join(self.dest, "empty")))
        self.assertTrue(os.path.isdir(os.path.join(self.dest, "deep", "er")))

    def test_existing_directory_is_not_an_error(self):
        os.makedirs(os.path.join(self.dest, "empty"))
        path = make_aar(os.path.join(self.tmp, "foo.aar"), dirs=["assets/empty/"])
        merge_aar_assets(path, self.dest)
        self.assertTrue(os.path.isdir(os.path.join(self.dest, "empty")))

    def test_last_writer_wins_and_is_reported(self):
        first = make_aar(
            os.path.join(self.tmp, "first.aar"),
            package="com.example.first",
            entries={"assets/shared.txt": b"first", "assets/only_first.txt": b"1"},
        )
        second = make_aar(
            os.path.join(self.tmp, "second.aar"),
            package="com.example.second",
            entries={"assets/shared.txt": b"second"},
        )
        self.assertEqual(merge_aar_assets(first, self.dest), [])
        self.assertEqual(merge_aar_assets(second, self.dest), ["shared.txt"])
        self.assertEqual(self.read("shared.txt"), b"second")
        self.assertEqual(self.read("only_first.txt"), b"1")

    def test_archive_without_assets(self):
        path = make_aar(os.path.join(self.tmp, "foo.aar"), entries={"classes.jar": b"c"})
        self.assertEqual(merge_aar_assets(path, self.dest), [])
        self.assertEqual(os.listdir(self.dest), [])

    def test_entry_escaping_destination_rejected(self):
        path = make_aar(
            os.path.join(self.tmp, "evil.aar"),
            entries={"assets/../../evil.txt": b"evil"},
        )
        with self.assertRaises(UnreadableArchiveError):
            merge_aar_assets(path, self.dest)
        self.assertFalse(os.path.exists(os.path.join(self.tmp, "evil.txt")))


if __name__ == "__main__":
    unittest.main()
