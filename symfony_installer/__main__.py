"""Allow ``python -m symfony_installer``."""

from symfony_installer.cli import main

if __name__ == "__main__":
    main()
