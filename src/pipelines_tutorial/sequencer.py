"""
Executes an ordered list of provisioning steps against the cluster
"""
import logging
import subprocess
import sys
import time
from typing import Callable, Iterable

from ruamel.yaml.error import YAMLError

from .exceptions import StepFailedError
from .models import (
    ApplyManifest,
    ApplyTemplatedManifest,
    DemoConfig,
    DescribePipeline,
    ExposeService,
    Info,
    Pause,
    ShowWebhookUrl,
)
from .openshift import OpenShiftClient
from .tekton import TektonClient
from .util import describe_manifest, render_manifest

LOG = logging.getLogger(__name__)


class Sequencer:
    """
    Runs steps strictly in order and stops at the first failure. Nothing is retried or rolled back; re-running is
    safe because every apply is create-or-update on the cluster side.
    """

    def __init__(self, config: DemoConfig, oc: OpenShiftClient, tkn: TektonClient,
                 sleep: Callable[[float], None] = time.sleep, out=None):
        self.config = config
        self.oc = oc
        self.tkn = tkn
        self.sleep = sleep
        self.out = out or sys.stdout
        self._handlers = {
            ApplyManifest: self._apply,
            ApplyTemplatedManifest: self._apply_templated,
            ExposeService: self._expose,
            Pause: self._pause,
            DescribePipeline: self._describe,
            Info: self._info,
            ShowWebhookUrl: self._webhook_url,
        }

    def run(self, steps: Iterable):
        for step in steps:
            self.execute(step)

    def execute(self, step):
        handler = self._handlers.get(type(step))
        if handler is None:
            raise TypeError(f'Unknown step type: {type(step).__name__}')
        if self.config.dry_run and not isinstance(step, Info):
            LOG.info('[dry-run] %s', step)
            return
        try:
            handler(step)
        except subprocess.CalledProcessError as e:
            raise StepFailedError(step, e.returncode) from e
        except OSError as e:
            LOG.error("%s failed: %s", step, e)
            raise StepFailedError(step, 1) from e

    def _apply(self, step: ApplyManifest):
        self.oc.apply_file(self.config.manifest(step.path))

    def _apply_templated(self, step: ApplyTemplatedManifest):
        text = render_manifest(self.config.manifest(step.path), self.config.namespace)
        try:
            objects = describe_manifest(text)
        except YAMLError as e:
            LOG.error('Manifest %s is not valid YAML after substitution: %s', step.path, e)
            raise StepFailedError(step, 1) from e
        LOG.debug('Applying %s into %s', ', '.join(objects), self.config.namespace)
        self.oc.apply_text(text)

    def _expose(self, step: ExposeService):
        service = self.oc.find_by_label('svc', step.selector)
        self.oc.expose(service)

    def _pause(self, step: Pause):
        self.sleep(step.seconds)

    def _describe(self, step: DescribePipeline):
        print('\nPipeline', file=self.out)
        print('===============', file=self.out)
        self.out.flush()
        self.tkn.describe(step.name)

    def _info(self, step: Info):
        LOG.info(step.message)

    def _webhook_url(self, step: ShowWebhookUrl):
        url = self.oc.webhook_url(step.selector)
        print(f'Webhook URL: {url}', file=self.out)
