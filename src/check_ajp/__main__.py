"""Allow running check-ajp with ``python -m check_ajp``."""

from check_ajp.main import cli_main

if __name__ == "__main__":
    cli_main()
