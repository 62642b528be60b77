"""
Data model for the demo: resource references, readiness conditions, pipeline runs, provisioning steps and operations
"""
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Callable,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from .exceptions import ConfigurationError

DEFAULT_NAMESPACE = "pipelines-tutorial"
DEFAULT_CLIENT_BINARY = "oc"
DEFAULT_PIPELINE_BINARY = "tkn"
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MANIFEST_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'manifests')

# Literal token in the tutorial manifests that is swapped for the active namespace
NAMESPACE_TOKEN = DEFAULT_NAMESPACE

SUCCEEDED_CONDITION = ("succeeded", "true")


@dataclass(frozen=True)
class ResourceReference:
    kind: str
    name: str
    namespace: Optional[str] = None

    def __str__(self):
        if self.namespace:
            return f'{self.kind}/{self.name} -n {self.namespace}'
        return f'{self.kind}/{self.name}'


@dataclass(frozen=True)
class ReadinessCondition:
    resource: ResourceReference
    jsonpath: str
    target: str
    wait_for_rollout: bool = False

    def __str__(self):
        return f'{self.resource} {self.jsonpath} == {self.target}'


class ReadinessState(Enum):
    PENDING = "Pending"
    READY = "Ready"
    FAILED = "Failed"


@dataclass
class PipelineRun:
    name: str
    pipeline: Optional[str] = None
    resources: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)
    condition: Optional[Tuple[str, str]] = None

    @property
    def passed(self) -> bool:
        if not self.condition:
            return False
        return tuple(value.lower() for value in self.condition) == SUCCEEDED_CONDITION

    @property
    def result(self) -> str:
        """`name=TypeStatus`, the form the validator reports"""
        return f'{self.name}={"".join(self.condition or ())}'


@dataclass(frozen=True)
class PipelineInvocation:
    pipeline: str
    resources: Mapping[str, str]
    params: Mapping[str, str]
    show_log: bool = True


#
# Provisioning steps. An operation is an ordered list of these, executed by the sequencer.
#
@dataclass(frozen=True)
class ApplyManifest:
    path: str


@dataclass(frozen=True)
class ApplyTemplatedManifest:
    path: str


@dataclass(frozen=True)
class ExposeService:
    selector: str


@dataclass(frozen=True)
class Pause:
    seconds: float


@dataclass(frozen=True)
class DescribePipeline:
    name: str


@dataclass(frozen=True)
class Info:
    message: str


@dataclass(frozen=True)
class ShowWebhookUrl:
    selector: str


@dataclass(frozen=True)
class Operation:
    name: str
    help: str
    steps: Sequence = ()
    requires_bootstrap: bool = False
    # Whether a leading `skip-bootstrap` argument may waive the bootstrap precondition
    allow_skip_bootstrap: bool = False
    # Runs after the steps; receives the operation context and returns an exit code
    action: Optional[Callable] = None


@dataclass
class DemoConfig:
    namespace: str = DEFAULT_NAMESPACE
    oc: str = DEFAULT_CLIENT_BINARY
    tkn: str = DEFAULT_PIPELINE_BINARY
    poll_interval: float = DEFAULT_POLL_INTERVAL
    readiness_timeout: Optional[float] = None
    manifest_dir: str = DEFAULT_MANIFEST_DIR
    log_level: str = DEFAULT_LOG_LEVEL
    dry_run: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DemoConfig":
        env = os.environ if environ is None else environ
        timeout = _seconds(env, 'DEMO_READINESS_TIMEOUT', None)
        log_level = (env.get('DEMO_LOG_LEVEL') or DEFAULT_LOG_LEVEL).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(f"DEMO_LOG_LEVEL: unknown log level '{log_level}'")
        return cls(
            namespace=env.get('NAMESPACE') or DEFAULT_NAMESPACE,
            oc=env.get('DEMO_OC_BINARY') or DEFAULT_CLIENT_BINARY,
            tkn=env.get('DEMO_TKN_BINARY') or DEFAULT_PIPELINE_BINARY,
            poll_interval=_seconds(env, 'DEMO_POLL_INTERVAL', DEFAULT_POLL_INTERVAL),
            readiness_timeout=timeout,
            manifest_dir=env.get('DEMO_MANIFEST_DIR') or DEFAULT_MANIFEST_DIR,
            log_level=log_level,
            dry_run=(env.get('DEMO_DRY_RUN') or '').lower() in ('1', 'true', 'yes'),
        )

    def manifest(self, *parts) -> str:
        return os.path.join(self.manifest_dir, *parts)


def _seconds(env: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    value = env.get(name)
    if not value:
        return default
    try:
        seconds = float(value)
    except ValueError:
        raise ConfigurationError(f"{name}: expected a number of seconds, got '{value}'") from None
    if seconds < 0:
        raise ConfigurationError(f"{name}: must not be negative, got '{value}'")
    return seconds
