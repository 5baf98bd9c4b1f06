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

import os
import sys
import argparse

from libattach.utils.context.namespace import CliNameSpace
from libattach.utils.context.context import CliContext
from libattach.utils.context.command import CliCommand
from libattach.utils.libs.archive import describe_aar
from libattach.utils.libs.errors import UnreadableArchiveError


class Inspect(CliCommand):
    def description(self) -> str:
        return """
        Show what the attach stage sees in an AAR library.

        Prints the declared package name (the deduplication key), the
        manifest entry it was read from, the assets that would be merged
        and the native libraries bundled under jni/.

        Examples:
            libattach inspect foo.aar
            libattach inspect foo.aar bar.aar
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="libattach inspect",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "aars",
            nargs="+",
            help="AAR files to inspect",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def print_aar(self, aar_path: str) -> bool:
        try:
            info = describe_aar(aar_path)
        except UnreadableArchiveError as e:
            print(f"   ❌ {e}")
            return False

        print(f"{os.path.basename(aar_path)}:")
        if info["package"]:
            print(f"   Package: {info['package']}")
        else:
            print("   ⚠️  Package: not found (attach will fail for this library)")
        print(f"   Manifest: {info['manifest'] or 'missing'}")
        print(f"   classes.jar: {'yes' if info['has_classes_jar'] else 'no'}")
        print(f"   Resources: {'yes' if info['has_resources'] else 'no'}")
        print(f"   Assets: {len(info['assets'])}")
        for asset in info["assets"]:
            print(f"      {asset}")
        for abi, libs in sorted(info["jni"].items()):
            print(f"   jni/{abi}: {', '.join(sorted(libs))}")
        return info["package"] is not None

    def exec(self, context: CliContext, args: CliNameSpace):
        ok = True
        for aar_path in args.aars:
            ok = self.print_aar(aar_path) and ok
        if not ok:
            sys.exit(1)
