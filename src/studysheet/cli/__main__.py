"""Studysheet CLI module entry point.

Enables running the CLI via: python -m studysheet.cli
"""

from studysheet.cli.main import cli

if __name__ == "__main__":
    cli()
