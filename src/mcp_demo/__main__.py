"""Allow ``python -m mcp_demo``."""

import sys

from mcp_demo.server import main

if __name__ == "__main__":
    sys.exit(main())
