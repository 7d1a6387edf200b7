#!/usr/bin/env python3
"""Main entry point for the Azkaban Nagios check."""

from check_azkaban.cli import main

if __name__ == "__main__":
    main()
