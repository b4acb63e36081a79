"""Allow running tasktally with ``python -m tasktally``."""

from tasktally.cli import cli_main

if __name__ == "__main__":
    cli_main()
