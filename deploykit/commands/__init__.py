"""DeployKit CLI commands."""
