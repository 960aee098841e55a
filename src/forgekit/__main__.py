"""
forgekit - CLI command framework.

Entry point for ``python -m forgekit``. The restart wrapper re-invokes
this module when dependencies change.
"""

import sys

from forgekit.interface.cli import main


if __name__ == "__main__":
    sys.exit(main())
