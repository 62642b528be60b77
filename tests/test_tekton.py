import io
from unittest.mock import MagicMock, patch

from pipelines_tutorial.models import PipelineInvocation, PipelineRun
from pipelines_tutorial.tekton import API_INVOCATION, TektonClient, parse_pipeline_runs, validate_pipeline_runs


def pipeline_run_item(name, type_='Succeeded', status='True'):
    return {
        'metadata': {'name': name},
        'spec': {
            'pipelineRef': {'name': 'build-and-deploy'},
            'resources': [{'name': 'git-repo', 'resourceRef': {'name': 'api-repo'}}],
            'params': [{'name': 'deployment-name', 'value': 'vote-api'}],
        },
        'status': {'conditions': [{'type': type_, 'status': status, 'reason': 'Done'}]},
    }


class TestValidatePipelineRuns:
    def test_any_failure_fails_and_is_named(self):
        out = io.StringIO()
        runs = [PipelineRun('A', condition=('Succeeded', 'True')), PipelineRun('B', condition=('Succeeded', 'False'))]
        assert validate_pipeline_runs(runs, out=out) == 1
        assert out.getvalue() == 'ERROR: test B=SucceededFalse but should be SucceededTrue\n'

    def test_all_passing(self):
        out = io.StringIO()
        assert validate_pipeline_runs([PipelineRun('A', condition=('Succeeded', 'True'))], out=out) == 0
        assert out.getvalue() == ''

    def test_no_runs_pass(self):
        assert validate_pipeline_runs([], out=io.StringIO()) == 0

    def test_condition_is_case_insensitive(self):
        assert validate_pipeline_runs([PipelineRun('A', condition=('succeeded', 'TRUE'))], out=io.StringIO()) == 0

    def test_run_without_condition_fails(self):
        out = io.StringIO()
        assert validate_pipeline_runs([PipelineRun('pending')], out=out) == 1
        assert 'pending=' in out.getvalue()


class TestParsePipelineRuns:
    def test_first_condition_only(self):
        item = pipeline_run_item('build-and-deploy-run-abc')
        item['status']['conditions'].append({'type': 'Succeeded', 'status': 'False'})
        run, = parse_pipeline_runs([item])
        assert run.name == 'build-and-deploy-run-abc'
        assert run.condition == ('Succeeded', 'True')
        assert run.pipeline == 'build-and-deploy'
        assert run.resources == {'git-repo': 'api-repo'}
        assert run.params == {'deployment-name': 'vote-api'}
        assert run.passed

    def test_missing_status(self):
        run, = parse_pipeline_runs([{'metadata': {'name': 'new'}}])
        assert run.condition is None
        assert not run.passed


class TestTektonClient:
    @patch('pipelines_tutorial.tekton.stream_process')
    def test_start_with_showlog(self, mock_stream):
        TektonClient('demo-ns').start(API_INVOCATION)
        mock_stream.assert_called_once_with([
            'tkn', '-n', 'demo-ns', 'pipeline', 'start', 'build-and-deploy',
            '-r', 'git-repo=api-repo', '-r', 'image=api-image',
            '-p', 'deployment-name=vote-api',
            '--showlog=true',
        ])

    @patch('pipelines_tutorial.tekton.run_process')
    def test_start_without_showlog(self, mock_run):
        mock_run.return_value = MagicMock(stdout='PipelineRun started: build-and-deploy-run-xyz\n')
        invocation = PipelineInvocation('p', resources={}, params={'a': 'b'}, show_log=False)
        TektonClient('demo-ns', tkn='/usr/local/bin/tkn').start(invocation)
        mock_run.assert_called_once_with(['/usr/local/bin/tkn', '-n', 'demo-ns', 'pipeline', 'start', 'p', '-p', 'a=b'])

    @patch('pipelines_tutorial.tekton.stream_process')
    def test_logs_follow_last(self, mock_stream):
        TektonClient('demo-ns').logs('build-and-deploy')
        mock_stream.assert_called_once_with(
            ['tkn', '-n', 'demo-ns', 'pipeline', 'logs', 'build-and-deploy', '--last', '-f'])
