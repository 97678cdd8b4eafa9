"""
Entry point for running jdkkit CLI as a module.

Usage: python -m jdkkit [command] [options]
"""

from jdkkit.cli.parser import main

if __name__ == "__main__":
    main()
