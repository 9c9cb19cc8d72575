"""A connection to the docker engine of a single host.
"""

import time
from collections import namedtuple

import docker
import docker.errors
import docker.tls
import docker.utils
import requests.exceptions

from clusterator.context import ctx
from clusterator.errors import ClusteratorError, TransportError, CreationError
from clusterator.machine import mark_swarm_master
from clusterator.services import DISCOVERY_SCHEME, CONSUL_HTTP_PORT


# Time to give a container after start before we go on. This is not a
# readiness check, processes usually just need a moment to come up.
DEFAULT_SETTLE_DELAY = 0.5


RemovalOutcome = namedtuple('RemovalOutcome', ['name', 'removed', 'error'])

Outcome = namedtuple('Outcome', ['hostname', 'connection', 'result', 'error'])


class DockerURL(object):
    """The ``tcp://host:port`` the engine listens on."""

    def __init__(self, url):
        self.url = url

    def __str__(self):
        return self.url

    @property
    def host_port(self):
        return self.url.split('://', 1)[-1]

    @property
    def host(self):
        return self.host_port.split(':', 1)[0]


def create_client(endpoint, api_version=None, timeout=60):
    """Build a docker-py client talking TLS to ``endpoint``.
    """
    try:
        tls_config = docker.tls.TLSConfig(
            client_cert=(endpoint.client_cert, endpoint.client_key),
            ca_cert=endpoint.ca_cert,
            verify=True)
        return docker.APIClient(
            base_url=endpoint.url, tls=tls_config,
            version=api_version, timeout=timeout)
    except (docker.errors.DockerException,
            requests.exceptions.RequestException) as e:
        raise TransportError(endpoint.name, e)


class DockerConnection(object):
    """Runs and removes containers on one host.

    Created per command invocation; holds the resolved endpoint and the
    client, and writes changes to the host record through ``directory``.
    """

    def __init__(self, endpoint, client, directory, settle_delay=DEFAULT_SETTLE_DELAY):
        self.endpoint = endpoint
        self.client = client
        self.directory = directory
        self.settle_delay = settle_delay
        self.url = DockerURL(endpoint.url)

    def __repr__(self):
        return '<DockerConnection %s>' % self.name

    @property
    def name(self):
        return self.endpoint.name

    @property
    def address(self):
        return self.url.host

    def advertise_address(self, port):
        return '%s:%s' % (self.address, port)

    def discovery_url(self, cluster_name):
        return '%s://%s/%s' % (
            DISCOVERY_SCHEME, self.advertise_address(CONSUL_HTTP_PORT),
            cluster_name)

    def _try_create(self, spec):
        """Create the container, return its id. Return ``None`` if the
        image is not available locally.
        """
        try:
            result = self.client.create_container(
                **spec.create_kwargs(self.client))
        except docker.errors.ImageNotFound:
            return None
        except docker.errors.APIError as e:
            raise CreationError(self.name, spec.name, e)
        except requests.exceptions.RequestException as e:
            raise TransportError(self.name, e)
        return result['Id']

    def pull(self, image, container_name):
        """Pull ``image`` for ``container_name``, discarding the progress
        output.
        """
        repository, tag = docker.utils.parse_repository_tag(image)
        ctx.log('Pulling %s on %s' % (image, self.name))
        try:
            for event in self.client.pull(
                    repository, tag=tag or 'latest', stream=True, decode=True):
                if 'error' in event:
                    raise CreationError(
                        self.name, container_name,
                        'pulling %s failed: %s' % (image, event['error']))
        except docker.errors.APIError as e:
            raise CreationError(
                self.name, container_name, 'pulling %s failed: %s' % (image, e))
        except requests.exceptions.RequestException as e:
            raise TransportError(self.name, e)

    def run_image(self, spec):
        """Create and start a container, return its id.

        If the image is missing, it is pulled and the create is retried,
        once.
        """
        container_id = self._try_create(spec)
        if container_id is None:
            self.pull(spec.image, spec.name)
            container_id = self._try_create(spec)
            if container_id is None:
                raise CreationError(
                    self.name, spec.name, 'image %s not found' % spec.image)

        ctx.log('Created %s/%s %s' % (self.name, spec.name, container_id))

        try:
            self.client.start(container_id)
        except docker.errors.APIError as e:
            raise CreationError(self.name, spec.name, e)
        except requests.exceptions.RequestException as e:
            raise TransportError(self.name, e)

        if self.settle_delay:
            time.sleep(self.settle_delay)
        return container_id

    def remove_forcibly(self, names):
        """Remove containers by name, killing them if running.

        Never fails; returns a :class:`RemovalOutcome` for every name. A
        container that does not exist counts as not removed, without an
        error.
        """
        outcomes = []
        for name in names:
            try:
                self.client.remove_container(name, v=True, force=True)
            except docker.errors.NotFound:
                ctx.log('%s/%s does not exist' % (self.name, name))
                outcomes.append(RemovalOutcome(name, False, None))
            except (docker.errors.APIError,
                    requests.exceptions.RequestException) as e:
                ctx.error('Removing %s/%s failed: %s' % (self.name, name, e))
                outcomes.append(RemovalOutcome(name, False, e))
            else:
                ctx.log('Removed %s/%s' % (self.name, name))
                outcomes.append(RemovalOutcome(name, True, None))
        return outcomes

    def containers(self):
        try:
            return self.client.containers(all=True)
        except (docker.errors.APIError,
                requests.exceptions.RequestException) as e:
            raise TransportError(self.name, e)

    def save_swarm_config(self, cluster_name):
        """Record in the machine directory that this host is a swarm
        master of ``cluster_name``.
        """
        record = self.directory.load(self.name)
        mark_swarm_master(record, self.discovery_url(cluster_name))
        self.directory.save(self.name, record)
        return record


def for_all_machines(connect, hostnames, func):
    """Connect to every host and call ``func`` with the connection.

    A host that fails (to resolve, or in ``func``) is reported and
    skipped. Returns an :class:`Outcome` per host, in order.
    """
    outcomes = []
    for hostname in hostnames:
        connection = None
        try:
            connection = connect(hostname)
            result = func(connection)
        except ClusteratorError as e:
            ctx.error(e)
            outcomes.append(Outcome(hostname, connection, None, e))
        else:
            outcomes.append(Outcome(hostname, connection, result, None))
    return outcomes
