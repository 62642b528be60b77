"""Error types raised by the demo. Each carries the process exit code the CLI terminates with."""


class DemoError(RuntimeError):
    """Base class for fatal demo failures."""
    exit_code = 1


class MissingToolError(DemoError):
    """Raised when the `oc` or `tkn` binary can not be run."""


class InvalidCommandError(DemoError):
    """Raised when the requested command is not a known operation."""

    def __init__(self, command):
        super().__init__(f"invalid command '{command}'")
        self.command = command


class StepFailedError(DemoError):
    """Raised when a provisioning step fails. Exits with the return code of the failed client call."""

    def __init__(self, step, returncode):
        super().__init__(f"step {step} failed with return code {returncode}")
        self.step = step
        self.exit_code = returncode or 1


class ReadinessTimeoutError(DemoError):
    """Raised when a readiness timeout is configured and the resource did not become ready in time."""

    def __init__(self, condition, timeout):
        super().__init__(f"timed out after {timeout}s waiting for {condition}")
        self.condition = condition
        self.timeout = timeout


class ConfigurationError(DemoError):
    """Raised when an environment setting can not be parsed."""
