"""feedpusher CLI: Typer-based command-line interface.

Provides the ``feedpusher`` command with subcommands to classify a
version, show the publication plan and run a publication.

All output uses Rich for formatted terminal display.
"""
