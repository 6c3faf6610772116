"""
ConfigCommand — View and change configuration

    gitloupe config                         # show effective settings
    gitloupe config --set scan.augment=false
    gitloupe config --set display.symbols=ascii --user
"""

from ..commands.base import BaseCommand, EXIT_OK, EXIT_FAILURE
from ..presentation.template import OutputTemplate


class ConfigCommand(BaseCommand):
    """Configuration display and modification."""

    def show_config(self) -> int:
        template = OutputTemplate(symbols=self.symbols)
        template.header("GITLOUPE CONFIG", "Current Configuration")
        template.section("SETTINGS", self._cli.config_manager.display())
        print(template.render())
        return EXIT_OK

    def set_config(self, key: str, value: str, scope: str = "project") -> int:
        symbols = self.symbols
        manager = self._cli.config_manager
        error = manager.set(key, value, scope)

        template = OutputTemplate(symbols=symbols)
        if error:
            template.header("GITLOUPE CONFIG", "Error")
            template.section("ERROR", error)
            print(template.render())
            return EXIT_FAILURE

        template.header("GITLOUPE CONFIG", "Configuration Updated")
        template.section("SETTING", f"Set {key} = {value}")
        path = manager.project_config_path if scope == "project" else manager.user_config_path
        template.section("SAVED TO", str(path))
        template.footer(f"{symbols.check_pass} Configuration saved")
        print(template.render())
        return EXIT_OK


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'config'


def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('--set', metavar='KEY=VALUE',
                   help='Set config value (e.g., scan.augment=false)')
    p.add_argument('--user', action='store_true',
                   help='Apply to user config instead of project')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    if args.set:
        if '=' not in args.set:
            print("Error: Use format KEY=VALUE (e.g., display.symbols=ascii)")
            return EXIT_FAILURE
        key, value = args.set.split('=', 1)
        scope = "user" if args.user else "project"
        return cli._config_cmd.set_config(key.strip(), value.strip(), scope)
    return cli._config_cmd.show_config()
