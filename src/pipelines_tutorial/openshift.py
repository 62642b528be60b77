import json
import logging
import subprocess
from typing import List, Optional

from .models import ResourceReference, ReadinessCondition
from .util import run_process, stream_process

LOG = logging.getLogger(__name__)
log = LOG

AVAILABLE_CONDITION = '{.status.conditions[0].type}'
PROJECT_PHASE = '{.status.phase}'


def _deployment_available(name, namespace):
    return ReadinessCondition(ResourceReference('deployment', name, namespace), AVAILABLE_CONDITION, 'Available',
                              wait_for_rollout=True)


# Everything the OpenShift Pipelines operator must bring up before the tutorial can be provisioned, in check order
OPERATOR_READINESS = (
    _deployment_available('openshift-pipelines-operator', 'openshift-operators'),
    ReadinessCondition(ResourceReference('project', 'openshift-pipelines'), PROJECT_PHASE, 'Active'),
    _deployment_available('tekton-pipelines-controller', 'openshift-pipelines'),
    _deployment_available('tekton-pipelines-webhook', 'openshift-pipelines'),
    _deployment_available('tekton-triggers-controller', 'openshift-pipelines'),
    _deployment_available('tekton-triggers-webhook', 'openshift-pipelines'),
)


class OpenShiftClient:
    """
    Thin wrapper around the `oc` binary. Every namespaced call is pinned to the namespace given at construction.
    """

    def __init__(self, namespace: str, oc: str = 'oc'):
        self.namespace = namespace
        self.oc = oc

    def _namespaced(self, *args) -> List[str]:
        cmd = [self.oc, '-n', self.namespace, *args]
        # Echo what we run so the demo audience can follow along
        log.info(' '.join(cmd))
        return cmd

    def get_field(self, resource: ResourceReference, jsonpath: str) -> str:
        """
        Reads a single field from a cluster object

        :param resource: The object to query
        :param jsonpath: A jsonpath expression, ex: `{.status.phase}`
        :return str: The field value. Raises CalledProcessError if the query fails
        """
        cmd = [self.oc, 'get', resource.kind, resource.name]
        if resource.namespace:
            cmd += ['-n', resource.namespace]
        cmd += ['-o', f'jsonpath={jsonpath}']
        return run_process(cmd, log_errors=False).stdout.strip()

    def rollout_status(self, resource: ResourceReference):
        cmd = [self.oc, 'rollout', 'status', '-w', resource.kind, resource.name]
        if resource.namespace:
            cmd += ['-n', resource.namespace]
        return stream_process(cmd)

    def namespace_exists(self) -> bool:
        try:
            run_process(self._namespaced('get', 'ns', self.namespace), log_errors=False)
            return True
        except (subprocess.CalledProcessError, OSError):
            return False

    def new_project(self):
        return run_process(self._namespaced('new-project', self.namespace))

    def ensure_namespace(self):
        log.info("ensure namespace %s exists", self.namespace)
        if not self.namespace_exists():
            self.new_project()

    def apply_file(self, path: str):
        proc = run_process(self._namespaced('apply', '-f', path))
        _log_output(proc.stdout)
        return proc

    def apply_text(self, text: str):
        proc = run_process(self._namespaced('apply', '-f', '-'), input=text)
        _log_output(proc.stdout)
        return proc

    def find_by_label(self, kind: str, selector: str) -> str:
        """
        :return str: `kind/name` of the first object matching the label selector, or an empty string
        """
        cmd = [self.oc, '-n', self.namespace, 'get', kind, '-l', selector, '-o', 'name']
        names = run_process(cmd).stdout.split()
        return names[0] if names else ''

    def expose(self, name: str):
        proc = run_process(self._namespaced('expose', name))
        _log_output(proc.stdout)
        return proc

    def route_url(self, route: str) -> str:
        """
        Formats a route's host as an HTTP URL. A missing route yields a URL with no host.

        :param route: Route name, either bare or as `route.route.openshift.io/<name>`
        """
        if not route:
            return 'http://'
        if '/' not in route:
            route = f'route/{route}'
        try:
            host = run_process([self.oc, '-n', self.namespace, 'get', route, '-o', 'jsonpath={.spec.host}'],
                               log_errors=False).stdout.strip()
        except (subprocess.CalledProcessError, OSError):
            log.debug('Route %s not found', route)
            host = ''
        return f'http://{host}'

    def webhook_url(self, selector: str) -> str:
        return self.route_url(self.find_by_label('route', selector))

    def list_pipeline_runs(self) -> List[dict]:
        proc = run_process([self.oc, 'get', 'pipelinerun.tekton.dev', '-n', self.namespace, '-o', 'json'])
        return json.loads(proc.stdout or '{}').get('items', [])


def _log_output(output: Optional[str]):
    for line in (output or '').splitlines():
        if line:
            log.info(line)
