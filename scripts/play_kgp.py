#!/usr/bin/env python3
"""Connect the agent to a KGP server (or stdin/stdout) and play."""

import sys

from kalah_agent.kgp.client import main

if __name__ == "__main__":
    sys.exit(main())
