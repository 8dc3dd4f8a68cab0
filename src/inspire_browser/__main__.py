"""Entry point for ``python -m inspire_browser``."""

import sys

from inspire_browser.cli import main

if __name__ == "__main__":
    sys.exit(main())
