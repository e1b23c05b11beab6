class DeploymentError(Exception):
    """Base class for every failure that aborts a deployment run."""


class MissingDependencyError(DeploymentError):
    """A required local tool is not installed or not callable."""


class AuthenticationError(DeploymentError):
    """The operator is not logged in and logging in failed."""


class PreconditionError(DeploymentError):
    """An expected resource or input does not exist."""


class ParametersError(PreconditionError):
    """The parameters file is missing or incomplete."""


class BuildError(DeploymentError):
    """Publishing or archiving the application failed."""


class SubmissionError(DeploymentError):
    """Validating or submitting the deployment failed."""
