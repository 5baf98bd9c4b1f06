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
import shutil

from libattach.utils.context.namespace import CliNameSpace
from libattach.utils.context.context import CliContext
from libattach.utils.context.command import CliCommand
from libattach.utils.libs.config import ConfigError, StageConfig
from libattach.utils.libs.constants import (
    ASSETS_FOLDER,
    CONFIG_FILE_NAME,
    EXPLODED_AARS_DIR_NAME,
    GENERATED_DIR_NAME,
    LIBS_DIR_NAME,
)


class Clean(CliCommand):
    def description(self) -> str:
        return f"""
        Remove the directories created by 'libattach attach'.

        Cleans the following directories of the configured build dir:
        - exploded-aars/          # Unpacked AAR libraries
        - generated/              # Generated sources
        - libs/                   # Native libraries
        - assets/                 # Merged assets (only with --assets)

        Examples:
            libattach clean              # Clean (with confirmation)
            libattach clean --dry-run    # Preview what will be cleaned
            libattach clean -y --assets  # Also remove merged assets
            libattach clean --config path/to/{CONFIG_FILE_NAME}
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="libattach clean",
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
            "--assets",
            action="store_true",
            help="Also remove the merged assets directory",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be cleaned without actually deleting",
        )
        parser.add_argument(
            "-y", "--yes",
            action="store_true",
            help="Skip confirmation prompts",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def get_clean_targets(self, config: StageConfig, include_assets: bool) -> list:
        targets = [
            os.path.join(config.build_dir, EXPLODED_AARS_DIR_NAME),
            os.path.join(config.build_dir, GENERATED_DIR_NAME),
            os.path.join(config.build_dir, LIBS_DIR_NAME),
        ]
        if include_assets:
            targets.append(config.assets_dir or os.path.join(config.build_dir, ASSETS_FOLDER))
        return [t for t in targets if os.path.exists(t)]

    def exec(self, context: CliContext, args: CliNameSpace):
        config_path = args.config
        if not os.path.isabs(config_path):
            config_path = os.path.join(context.home_path, config_path)
        try:
            config = StageConfig.from_file(config_path)
        except ConfigError as e:
            print(f"ERROR: {e}")
            sys.exit(1)
        if not config.build_dir:
            print("ERROR: [build] requires 'dir' to be specified")
            sys.exit(1)

        targets = self.get_clean_targets(config, args.assets)
        if not targets:
            print("Nothing to clean.")
            return

        print("The following directories will be removed:")
        for target in targets:
            print(f"  {target}")

        if args.dry_run:
            print("\n(dry run, nothing was removed)")
            return

        if not args.yes:
            response = input("\nDo you want to continue? (y/N): ")
            if response.lower() != "y":
                print("Aborted.")
                sys.exit(0)

        for target in targets:
            shutil.rmtree(target)
            print(f"   🗑️  Removed {target}")
        print("\n✅ Clean completed")
