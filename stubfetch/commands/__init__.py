"""CLI subcommands for stubfetch."""
