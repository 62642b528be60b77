"""
Starts pipeline runs through the `tkn` client and validates their results
"""
import logging
import sys
from typing import Iterable, List, Mapping

from .models import PipelineInvocation, PipelineRun
from .util import run_process, stream_process

LOG = logging.getLogger(__name__)

PIPELINE_NAME = 'build-and-deploy'

API_INVOCATION = PipelineInvocation(
    pipeline=PIPELINE_NAME,
    resources={'git-repo': 'api-repo', 'image': 'api-image'},
    params={'deployment-name': 'vote-api'},
)

UI_INVOCATION = PipelineInvocation(
    pipeline=PIPELINE_NAME,
    resources={'git-repo': 'ui-repo', 'image': 'ui-image'},
    params={'deployment-name': 'vote-ui'},
)


class TektonClient:
    """
    Thin wrapper around the `tkn` binary, pinned to one namespace
    """

    def __init__(self, namespace: str, tkn: str = 'tkn'):
        self.namespace = namespace
        self.tkn = tkn

    def _namespaced(self, *args) -> List[str]:
        cmd = [self.tkn, '-n', self.namespace, *args]
        LOG.info(' '.join(cmd))
        return cmd

    def start(self, invocation: PipelineInvocation):
        """
        Starts a pipeline run. With `show_log` set this blocks, streaming the run's logs until it completes.

        :param invocation: Pipeline name and its resource and string parameters
        :return: The completed sub-process object
        """
        args = ['pipeline', 'start', invocation.pipeline]
        args += _key_values('-r', invocation.resources)
        args += _key_values('-p', invocation.params)
        if invocation.show_log:
            return stream_process(self._namespaced(*args, '--showlog=true'))
        proc = run_process(self._namespaced(*args))
        LOG.info(proc.stdout.strip())
        return proc

    def logs(self, pipeline: str = PIPELINE_NAME, last: bool = True, follow: bool = True):
        args = ['pipeline', 'logs', pipeline]
        if last:
            args.append('--last')
        if follow:
            args.append('-f')
        return stream_process(self._namespaced(*args))

    def describe(self, pipeline: str = PIPELINE_NAME):
        return stream_process(self._namespaced('pipeline', 'describe', pipeline))


def _key_values(flag: str, values: Mapping[str, str]) -> List[str]:
    args = []
    for key, value in values.items():
        args += [flag, f'{key}={value}']
    return args


def parse_pipeline_runs(items: Iterable[Mapping]) -> List[PipelineRun]:
    """
    Builds PipelineRun objects from the `items` of a `pipelinerun.tekton.dev` list. Only the first reported
    condition of each run is kept.
    """
    runs = []
    for item in items:
        spec = item.get('spec') or {}
        conditions = (item.get('status') or {}).get('conditions') or []
        condition = None
        if conditions:
            condition = (conditions[0].get('type', ''), conditions[0].get('status', ''))
        runs.append(PipelineRun(
            name=(item.get('metadata') or {}).get('name', ''),
            pipeline=(spec.get('pipelineRef') or {}).get('name'),
            resources={r.get('name'): (r.get('resourceRef') or {}).get('name') for r in spec.get('resources') or []},
            params={p.get('name'): p.get('value') for p in spec.get('params') or []},
            condition=condition,
        ))
    return runs


def validate_pipeline_runs(runs: Iterable[PipelineRun], out=None) -> int:
    """
    Reports every run that did not succeed

    :param runs: Pipeline runs to check. An empty set passes
    :param out: Stream for the per-run diagnostics. Defaults to stdout
    :return int: 1 if any run did not succeed, 0 otherwise
    """
    out = out or sys.stdout
    failed = 0
    for run in runs:
        if run.passed:
            LOG.debug('Pipeline run %s succeeded', run.name)
            continue
        print(f'ERROR: test {run.result} but should be SucceededTrue', file=out)
        failed = 1
    return failed
