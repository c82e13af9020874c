"""DeployKit - Deployer runs over an ephemeral SSH session."""

__version__ = "1.0.0"
