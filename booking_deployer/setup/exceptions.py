"""Exception classes for the booking payment deployer."""


class DeployToolError(Exception):
    """Base exception for deployment tooling errors."""

    pass


class ChainConnectionError(DeployToolError, ConnectionError):
    """Raised when the RPC endpoint cannot be reached."""

    pass


class ChainQueryError(DeployToolError):
    """Raised when a chain query fails; carries the name of the failed call."""

    def __init__(self, call: str, detail: object):
        self.call = call
        self.detail = detail
        super().__init__(f"{call} failed: {detail}")


class DeploymentError(DeployToolError):
    """Raised when the contract creation transaction fails or reverts."""

    pass


class VerificationError(DeployToolError):
    """Raised when no code is present at the deployed address."""

    pass


class ConfigReconcileError(DeployToolError):
    """Raised when application.properties could not be reconciled."""

    pass


class ArtifactError(DeployToolError, ValueError):
    """Raised when a contract artifact is missing or malformed."""

    pass
