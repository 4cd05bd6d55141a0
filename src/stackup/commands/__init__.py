"""stackup CLI subcommands."""
