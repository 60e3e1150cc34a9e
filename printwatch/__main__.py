"""
printwatch - Module Entry Point.

Allows running the CLI as a module:
    python -m printwatch discover <cidr>
    python -m printwatch poll <host>
"""

import sys

from printwatch.cli import main

if __name__ == '__main__':
    sys.exit(main())
