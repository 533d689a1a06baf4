"""
Engine 진입점

실행 방법:
    python -m engine --help
"""

import sys

from engine.cli import main

if __name__ == "__main__":
    sys.exit(main())
