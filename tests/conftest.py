import copy

import mock
import pytest

from clusterator.cluster import Cluster
from clusterator.context import set_context, Context
from clusterator.errors import ResolutionError
from clusterator.machine import HostDirectory


def machine_record(name, ip):
    """A host record the way docker-machine stores it, trimmed down."""
    certs = '/home/user/.docker/machine/machines/%s' % name
    return {
        'Name': name,
        'DriverName': 'virtualbox',
        'Driver': {'IPAddress': ip, 'MachineName': name},
        'HostOptions': {
            'AuthOptions': {
                'CaCertPath': '%s/ca.pem' % certs,
                'ClientCertPath': '%s/cert.pem' % certs,
                'ClientKeyPath': '%s/key.pem' % certs,
            },
            'SwarmOptions': {
                'IsSwarm': False,
                'Master': False,
                'Discovery': '',
            },
        },
    }


class MemoryDirectory(HostDirectory):
    """Keeps the host records in a dict."""

    def __init__(self, records=None):
        self.records = records or {}
        self.saved = []
        self.started = []

    def load(self, name):
        if name not in self.records:
            raise ResolutionError(name, 'unknown host')
        return copy.deepcopy(self.records[name])

    def save(self, name, record):
        self.records[name] = record
        self.saved.append(name)

    def start(self, name):
        self.started.append(name)


class FakeEngines(object):
    """Hands out a mock docker client per host.

    All container creates and starts, on any host, end up in ``journal``
    so tests can check the order things happened in.
    """

    def __init__(self):
        self.clients = {}
        self.journal = []

    def __call__(self, endpoint):
        return self.client(endpoint.name)

    def client(self, hostname):
        if hostname not in self.clients:
            self.clients[hostname] = self._make_client(hostname)
        return self.clients[hostname]

    def _make_client(self, hostname):
        client = mock.Mock()

        def create_container(**kwargs):
            self.journal.append(('create', hostname, kwargs['name']))
            return {'Id': '%s-%s' % (hostname, kwargs['name'])}

        def start(container_id):
            self.journal.append(('start', hostname, container_id))

        client.create_container.side_effect = create_container
        client.start.side_effect = start
        client.pull.return_value = iter([{'status': 'Pulling fs layer'}])
        return client

    def commands(self, hostname, container_name):
        """The commands of all containers named ``container_name`` that
        were created on the host.
        """
        if hostname not in self.clients:
            return []
        return [c[1]['command']
                for c in self.clients[hostname].create_container.call_args_list
                if c[1]['name'] == container_name]

    def created(self, hostname=None):
        return [(h, n) for kind, h, n in self.journal
                if kind == 'create' and (hostname is None or h == hostname)]


class TestContext(Context):
    def __init__(self, *a, **kw):
        Context.__init__(self, *a, **kw)
        self.items = []
    def custom(self, **kwargs):
        self.items.append(kwargs)
        print(kwargs)
    def filter(self, key, value=None):
        items = [i for i in self.items if key in i]
        if value:
            items = [i for i in items if i[key] == value]
        return items


@pytest.fixture(autouse=True)
def context(request):
    context = TestContext()
    set_context(context)
    def close():
        set_context(Context())
    request.addfinalizer(close)
    return context


@pytest.fixture
def directory():
    return MemoryDirectory({
        'node%d' % i: machine_record('node%d' % i, '10.0.0.%d' % i)
        for i in range(1, 6)})


@pytest.fixture
def engines():
    return FakeEngines()


@pytest.fixture
def cluster(directory, engines):
    """A cluster on the in-memory directory, talking to mock engines,
    without any settling delay.
    """
    return Cluster(directory, settle_delay=0, client_factory=engines)


@pytest.fixture
def connection(cluster):
    return cluster.connect('node1')
