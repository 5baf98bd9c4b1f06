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
from libattach.utils.context.result import CliResult
from libattach.utils.libs.config import ConfigError, StageConfig
from libattach.utils.libs.constants import CONFIG_FILE_NAME
from libattach.utils.libs.resolver import LibraryResolver


class Attach(CliCommand):
    def description(self) -> str:
        return f"""
        Attach the AAR and native libraries described in {CONFIG_FILE_NAME}.

        For every component type listed under [libs] and [native_libs]:
        - .aar libraries are exploded into <build>/exploded-aars/<package>/
          (once per package name) and their assets merged into the assets dir
        - native libraries are copied into <build>/libs/<abi>/, with
          extension libraries under <build>/libs/<abi>/external_comps/

        Examples:
            libattach attach
            libattach attach --config path/to/{CONFIG_FILE_NAME}
            libattach attach --native-only -v
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="libattach attach",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--config",
            action="store",
            default=CONFIG_FILE_NAME,
            help=f"Path to the configuration file (default: ./{CONFIG_FILE_NAME})",
        )
        parser.add_argument(
            "--aar-only",
            action="store_true",
            help="Attach AAR libraries only, skip native libraries",
        )
        parser.add_argument(
            "--native-only",
            action="store_true",
            help="Attach native libraries only, skip AAR libraries",
        )
        parser.add_argument(
            "-v", "--verbose",
            action="store_true",
            help="Print every library as it is attached",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def run(self, context: CliContext, args: CliNameSpace) -> CliResult:
        config_path = args.config
        if not os.path.isabs(config_path):
            config_path = os.path.join(context.home_path, config_path)

        try:
            config = StageConfig.from_file(config_path)
        except ConfigError as e:
            return CliResult.failure(e)

        is_valid, message = config.validate()
        if not is_valid:
            return CliResult.failure(ConfigError(message))

        print(f"Attaching libraries with {config_path}")
        print(config.get_config_summary())

        resolver = LibraryResolver(
            config.build_dir,
            config.create_locator(),
            merged_asset_dir=config.assets_dir or None,
            support_aars=config.support_aars,
            verbose=args.verbose or config.verbose,
        )
        libs_needed = config.libs_needed()
        native_libs_needed = config.native_libs_needed()

        if args.native_only:
            return resolver.attach_native_libraries(native_libs_needed)
        if args.aar_only:
            return resolver.attach_aar_libraries(libs_needed)
        return resolver.execute(libs_needed, native_libs_needed)

    def exec(self, context: CliContext, args: CliNameSpace):
        result = self.run(context, args)
        if result.is_failure():
            print(f"\nERROR: {result.get_error()}")
            sys.exit(1)

        value = result.get_value()
        if isinstance(value, dict):
            print(f"\n✅ Attached {len(value['exploded_libs'])} AAR libraries "
                  f"and {len(value['native_libs'])} native libraries")
            if value["asset_collisions"]:
                print(f"   ⚠️  {len(value['asset_collisions'])} asset(s) were overwritten")
        else:
            print(f"\n✅ Attached {len(value)} libraries")
