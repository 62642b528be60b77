import io

import pytest

from pipelines_tutorial.handlers import DemoContext
from pipelines_tutorial.models import DemoConfig
from pipelines_tutorial.readiness import ReadinessPoller
from pipelines_tutorial.sequencer import Sequencer
from tests.fakes import FakeOpenShift, FakeTekton


@pytest.fixture
def events():
    return []


@pytest.fixture
def make_context(events, tmp_path):
    """Builds a DemoContext wired to fakes. Sleeps are recorded as events."""

    def _make(namespace='demo-ns', oc=None, dry_run=False, manifest_dir=None):
        config = DemoConfig(namespace=namespace, dry_run=dry_run)
        if manifest_dir is not None:
            config.manifest_dir = str(manifest_dir)
        oc = oc or FakeOpenShift(events, namespace)
        tkn = FakeTekton(events)
        out = io.StringIO()

        def sleep(seconds):
            events.append(('sleep', seconds))

        poller = ReadinessPoller(oc.get_field, rollout=oc.rollout_status, sleep=sleep)
        sequencer = Sequencer(config, oc, tkn, sleep=sleep, out=out)
        return DemoContext(config, oc, tkn, poller, sequencer, out)

    return _make
