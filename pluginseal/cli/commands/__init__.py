"""pluginseal subcommand implementations."""
