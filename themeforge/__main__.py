"""Entry point for `python -m themeforge`."""

import sys


def main():
    from themeforge.cli import main as cli_main
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
