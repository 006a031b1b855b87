"""Allow running Playcaster with ``python -m playcaster``."""

import sys

from playcaster.cli import main

if __name__ == "__main__":
    sys.exit(main())
