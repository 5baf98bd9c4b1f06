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
import importlib
import argparse

from libattach.utils.context.namespace import CliNameSpace
from libattach.utils.context.context import CliContext
from libattach.utils.context.command import CliCommand

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """libattach - Android library attachment stage

Resolves the AAR and native libraries required by app components and
places them into the build tree:
    exploded-aars/<package>/   Unpacked AAR libraries
    assets/                    Merged AAR assets
    libs/<abi>/                Native libraries (per ABI)

USAGE:
    libattach <command> [options]

COMMANDS:
    attach      Attach AAR and native libraries described in LIBATTACH.toml
    inspect     Show package name, assets and native entries of an AAR
    clean       Remove the directories created by attach

EXAMPLES:
    libattach attach                       # Use ./LIBATTACH.toml
    libattach attach --config app.toml -v  # Verbose, custom config
    libattach inspect foo.aar              # Inspect an AAR
    libattach clean -y                     # Clean without confirmation

For more information on a specific command:
    libattach <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if (
                not command.startswith(("_", "test_"))
                and command.endswith(".py")
            ):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def _root_parser(self, add_help=True) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="libattach",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=add_help,
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            nargs="?" if not add_help else None,
            choices=self.get_command_list(),
        )
        return parser

    def cli(self) -> CliNameSpace:
        # Help for the root command only, not for "libattach attach --help"
        if len(sys.argv) == 2 and sys.argv[1] in ["--help", "-h"]:
            self._root_parser().print_help()
            sys.exit(0)

        # parse only known args - this will NOT consume --help if present
        parser = self._root_parser(add_help=False)
        args, unknown = parser.parse_known_args(namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if not args.subcommand:
            print("ERROR: No command specified\n")
            self._root_parser().print_help()
            sys.exit(1)

        # get module and class name
        module_name = f"libattach.commands.{args.subcommand}"
        class_name = args.subcommand.capitalize()
        module = importlib.import_module(module_name)
        klass = getattr(module, class_name)
        # now execute the subcommand
        sub_cmd = klass()
        sub_cmd.exec(context, sub_cmd.cli())


def main():
    cmd = Cli()
    cmd.exec(CliContext(), cmd.cli())


if __name__ == "__main__":
    main()
