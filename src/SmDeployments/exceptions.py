# exceptions.py
# error taxonomy of the compile -> artifact -> deploy pipeline


class DeploymentError(Exception):
    """Base exception for every pipeline failure."""

    tag = "DeploymentError"


class InvalidSourceFormat(DeploymentError, ValueError):
    """Raised when cleaned source does not start with a comment or pragma."""

    tag = "InvalidSourceFormat"

    def __init__(self, message, prefix=""):
        super().__init__(message)
        self.prefix = prefix


class CompilerInvocationError(DeploymentError, RuntimeError):
    """Raised when solc cannot be run or returns no usable output."""

    tag = "CompilerInvocationError"


class CompilationError(DeploymentError, ValueError):
    """Raised when solc reports error-severity diagnostics."""

    tag = "CompilationError"

    def __init__(self, message, diagnostics=None):
        super().__init__(message)
        self.diagnostics = diagnostics or []


class ContractNotFound(DeploymentError, LookupError):
    """Raised when the requested contract is absent from source or compiler output."""

    tag = "ContractNotFound"

    def __init__(self, message, available=None):
        super().__init__(message)
        self.available = list(available or [])


class AmbiguousContractName(ContractNotFound):
    """Raised when more than one deployable contract is declared."""

    tag = "AmbiguousContractName"


class IncompleteArtifact(DeploymentError, ValueError):
    """Raised when compiler output lacks ABI or deployable bytecode."""

    tag = "IncompleteArtifact"


class ArtifactNotFound(DeploymentError, FileNotFoundError):
    """Raised when no artifact record has been stored."""

    tag = "ArtifactNotFound"


class ArtifactCorrupt(DeploymentError, ValueError):
    """Raised when a stored artifact record cannot be parsed."""

    tag = "ArtifactCorrupt"


class ChainConnectionError(DeploymentError, ConnectionError):
    """Raised when the JSON-RPC node does not answer the liveness probe."""

    tag = "ConnectionError"


class NoAccountsAvailable(DeploymentError, LookupError):
    """Raised when the node manages no accounts."""

    tag = "NoAccountsAvailable"


class InvalidPrivateKey(DeploymentError, ValueError):
    """Raised when the configured deployer key is not a valid secp256k1 key."""

    tag = "InvalidPrivateKey"


class InsufficientBalance(DeploymentError, ValueError):
    """Raised when the deployer cannot pay for the deployment."""

    tag = "InsufficientBalance"

    def __init__(self, message, address=None, balance_wei=0, required_wei=0):
        super().__init__(message)
        self.address = address
        self.balance_wei = balance_wei
        self.required_wei = required_wei


class InsufficientPreflightBalance(InsufficientBalance):
    """Balance is below the fixed minimum floor."""

    stage = "preflight"


class InsufficientBalanceForCost(InsufficientBalance):
    """Balance is below gas limit x gas price."""

    stage = "cost"


class InvalidConstructorArguments(DeploymentError, ValueError):
    """Raised when caller-supplied constructor arguments do not fit the ABI."""

    tag = "InvalidConstructorArguments"


class DeploymentFailed(DeploymentError, RuntimeError):
    """Raised when every submission attempt failed."""

    tag = "DeploymentFailed"

    def __init__(self, message, attempts=0, last_error=None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class DeploymentTimeout(DeploymentError, TimeoutError):
    """Raised when the deploy stage exceeds the configured timeout."""

    tag = "DeploymentTimeout"
