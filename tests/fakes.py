"""Stand-ins for the oc and tkn clients that record calls instead of running them."""


class FakeOpenShift:
    """Records every call in a shared event list instead of running `oc`."""

    def __init__(self, events, namespace, exists=True, statuses=None, pipeline_runs=None,
                 service='service/el-vote-app', host='el-vote-app.apps.example.com'):
        self.events = events
        self.namespace = namespace
        self.exists = exists
        self.statuses = statuses or {}
        self.pipeline_runs = pipeline_runs or []
        self.service = service
        self.host = host

    def get_field(self, resource, jsonpath):
        self.events.append(('get_field', resource.name))
        return self.statuses.get(resource.name, '')

    def rollout_status(self, resource):
        self.events.append(('rollout_status', resource.name))

    def namespace_exists(self):
        self.events.append(('namespace_exists', self.namespace))
        return self.exists

    def new_project(self):
        self.events.append(('new_project', self.namespace))

    def ensure_namespace(self):
        if not self.namespace_exists():
            self.new_project()

    def apply_file(self, path):
        self.events.append(('apply_file', path))

    def apply_text(self, text):
        self.events.append(('apply_text', text))

    def find_by_label(self, kind, selector):
        self.events.append(('find_by_label', kind, selector))
        return self.service if kind == 'svc' else 'route.route.openshift.io/el-vote-app'

    def expose(self, name):
        self.events.append(('expose', name))

    def route_url(self, route):
        return f'http://{self.host}'

    def webhook_url(self, selector):
        self.events.append(('webhook_url', selector))
        return self.route_url(self.find_by_label('route', selector))

    def list_pipeline_runs(self):
        return self.pipeline_runs


class FakeTekton:
    def __init__(self, events):
        self.events = events

    def start(self, invocation):
        self.events.append(('start', invocation.params['deployment-name']))

    def logs(self, pipeline, last=True, follow=True):
        self.events.append(('logs', pipeline))

    def describe(self, pipeline):
        self.events.append(('describe', pipeline))
