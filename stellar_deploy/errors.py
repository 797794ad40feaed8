"""Errors raised while deploying and initializing Soroban contracts."""


class DeploymentError(RuntimeError):
    """Base error for every failure that aborts a deployment run."""


class ConfigurationError(DeploymentError):
    """Raised when the chains config or CLI options are missing values."""


class MissingDependencyError(DeploymentError):
    """Raised when a contract needs another contract that is not deployed yet."""


class UnknownContractError(DeploymentError):
    """Raised for a contract name this tool does not know how to initialize."""


class DeploymentFailedError(DeploymentError):
    """Raised when the deploy binary fails or prints no contract address."""


class RemoteCallFailedError(DeploymentError):
    """Raised when a contract call is rejected by the network."""


class DomainSeparatorError(DeploymentError):
    """Raised when the on-chain domain separator differs from the expected one."""
