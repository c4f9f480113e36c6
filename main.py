#!/usr/bin/env python3
"""Entry point for the Celestia rebalancer CLI.

Runs the same command line as the installed `celestia-rebalancer` script,
for use from a source checkout.
"""

from src.celestia_rebalancer.cli import main


if __name__ == "__main__":
    main()
