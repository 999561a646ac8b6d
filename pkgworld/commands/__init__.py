"""CLI subcommands for pkgworld."""
