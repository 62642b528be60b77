"""
The demo operations

* `OPERATIONS` - Every command the CLI accepts, keyed by its exact name
* `run_operation` - Enforces the bootstrap precondition, runs the operation's steps and then its action

"""
import logging
import sys
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from .models import (
    ApplyManifest,
    ApplyTemplatedManifest,
    DemoConfig,
    DescribePipeline,
    ExposeService,
    Info,
    Operation,
    Pause,
    ShowWebhookUrl,
)
from .openshift import OPERATOR_READINESS, OpenShiftClient
from .readiness import ReadinessPoller
from .sequencer import Sequencer
from .tekton import API_INVOCATION, PIPELINE_NAME, UI_INVOCATION, TektonClient, parse_pipeline_runs, \
    validate_pipeline_runs
from .util import validate_tools

# All loggers in this package inherit from `pipelines_tutorial`
LOG = logging.getLogger("pipelines_tutorial")

SKIP_BOOTSTRAP = 'skip-bootstrap'
EVENT_LISTENER_SELECTOR = 'eventlistener=vote-app'
APPLICATION_ROUTE = 'vote-ui'

PIPELINE_STEPS = (
    Info('Apply pipeline tasks'),
    ApplyManifest('01_pipeline/01_apply_manifest_task.yaml'),
    ApplyManifest('01_pipeline/02_update_deployment_task.yaml'),
    Info('Applying resources'),
    ApplyTemplatedManifest('01_pipeline/03_resources.yaml'),
    Info('Applying pipeline'),
    ApplyManifest('01_pipeline/04_pipeline.yaml'),
    DescribePipeline(PIPELINE_NAME),
)

TRIGGER_STEPS = (
    Info('Setup Triggers'),
    ApplyManifest('03_triggers/01_binding.yaml'),
    ApplyTemplatedManifest('03_triggers/02_template.yaml'),
    Info('Setup Event Listener'),
    ApplyManifest('03_triggers/03_event_listener.yaml'),
    # The listener's service and route are created asynchronously
    Pause(3),
    Info('Expose event listener'),
    ExposeService(EVENT_LISTENER_SELECTOR),
    Pause(5),
    ShowWebhookUrl(EVENT_LISTENER_SELECTOR),
)


@dataclass
class DemoContext:
    config: DemoConfig
    oc: OpenShiftClient
    tkn: TektonClient
    poller: ReadinessPoller
    sequencer: Sequencer
    out: object


def build_context(config: DemoConfig, sleep: Callable[[float], None] = time.sleep, out=None) -> DemoContext:
    """
    Wires the clients, poller and sequencer for one invocation. The namespace is fixed from here on.
    """
    out = out or sys.stdout
    oc = OpenShiftClient(config.namespace, config.oc)
    tkn = TektonClient(config.namespace, config.tkn)
    poller = ReadinessPoller(oc.get_field, rollout=oc.rollout_status, interval=config.poll_interval,
                             timeout=config.readiness_timeout, sleep=sleep)
    sequencer = Sequencer(config, oc, tkn, sleep=sleep, out=out)
    return DemoContext(config, oc, tkn, poller, sequencer, out)


def bootstrap(ctx: DemoContext):
    """
    Makes sure the tools are present, the OpenShift Pipelines operator is running and the namespace exists
    """
    if ctx.config.dry_run:
        LOG.info('[dry-run] bootstrap for namespace %s', ctx.config.namespace)
        return
    validate_tools(ctx.config.oc, ctx.config.tkn)
    LOG.info('Verifying the OpenShift Pipelines operator installation')
    ctx.poller.wait_all(OPERATOR_READINESS)
    LOG.info('Operator installed successfully.')
    ctx.oc.ensure_namespace()


def run_pipelines(ctx: DemoContext) -> int:
    LOG.info('Running API Build and deploy')
    ctx.tkn.start(API_INVOCATION)
    LOG.info('Running UI Build and deploy')
    ctx.tkn.start(UI_INVOCATION)
    LOG.info('Validating the result of pipeline run')
    return validate_pipelines(ctx)


def validate_pipelines(ctx: DemoContext) -> int:
    runs = parse_pipeline_runs(ctx.oc.list_pipeline_runs())
    return validate_pipeline_runs(runs, out=ctx.out)


def show_logs(ctx: DemoContext) -> int:
    ctx.tkn.logs(PIPELINE_NAME)
    return 0


def show_url(ctx: DemoContext) -> int:
    print('Click following URL to access the application', file=ctx.out)
    print(ctx.oc.route_url(APPLICATION_ROUTE), file=ctx.out)
    return 0


def show_help(ctx: DemoContext) -> int:
    print(usage(), file=ctx.out)
    return 0


OPERATIONS: Mapping[str, Operation] = {op.name: op for op in (
    Operation('setup', 'runs both pipeline and trigger setup',
              steps=PIPELINE_STEPS + TRIGGER_STEPS, requires_bootstrap=True),
    Operation('setup-pipeline', 'sets up project, tasks, pipeline and resources',
              steps=PIPELINE_STEPS, requires_bootstrap=True, allow_skip_bootstrap=True),
    Operation('setup-triggers', 'sets up trigger-template, bindings, event-listener, expose webhook url',
              steps=TRIGGER_STEPS, requires_bootstrap=True, allow_skip_bootstrap=True),
    Operation('run', 'starts pipeline to deploy api, ui', action=run_pipelines),
    Operation('webhook-url', 'provides the webhook url, which listens to github-event payloads',
              steps=(ShowWebhookUrl(EVENT_LISTENER_SELECTOR),)),
    Operation('logs', 'shows logs of last pipelinerun', action=show_logs),
    Operation('url', 'provides the url of the application', action=show_url),
    Operation('help', 'shows this help', action=show_help),
)}


def usage() -> str:
    lines = ['USAGE:', '  demo [command]', '', 'COMMANDS:']
    for name, operation in OPERATIONS.items():
        lines.append(f'  {name:<17} {operation.help}')
    return '\n'.join(lines)


def run_operation(operation: Operation, ctx: DemoContext, args: Sequence[str] = ()) -> int:
    """
    Runs one operation

    :param operation: The operation to run
    :param ctx: Clients and config for this invocation
    :param args: Extra command line arguments. `skip-bootstrap` waives bootstrap where the operation allows it
    :return int: Exit code
    """
    skip = operation.allow_skip_bootstrap and len(args) > 0 and args[0] == SKIP_BOOTSTRAP
    if operation.requires_bootstrap and not skip:
        bootstrap(ctx)
    ctx.sequencer.run(operation.steps)
    if operation.action is None:
        return 0
    if ctx.config.dry_run and operation.action is not show_help:
        LOG.info('[dry-run] %s', operation.action.__name__)
        return 0
    return operation.action(ctx) or 0
