"""
Entry point for running Kisokyu as a module.

Usage:
    python -m kisokyu.delivery study
    python -m kisokyu.delivery stats
    python -m kisokyu.delivery --help
"""
from .quiz_cli import main

if __name__ == "__main__":
    main()
