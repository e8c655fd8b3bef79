"""
Entry point for running the advinstkit CLI as a module.

Usage: python -m advinstkit [command] [options]
"""

from advinstkit.cli.parser import main

if __name__ == "__main__":
    main()
