"""Brings up consul, swarm and registrator across a list of hosts.

The first host bootstraps the consul cluster, expecting a majority of all
the hosts given to show up. All other hosts join through it. Only once
every host has joined do the swarm agent, swarm master and registrator
get started, on each of them.
"""

from clusterator import services
from clusterator.connection import (
    DockerConnection, create_client, for_all_machines, DEFAULT_SETTLE_DELAY)
from clusterator.context import ctx
from clusterator.errors import IncompleteQuorumError


DEFAULT_CLUSTER_NAME = 'barney'


def quorum_size(host_count):
    return host_count // 2 + 1


def join_address(connection):
    """Where consul servers join the cluster bootstrapped on ``connection``.
    """
    return connection.advertise_address(services.CONSUL_SERF_LAN_PORT)


class Cluster(object):
    """One cluster, identified by ``name``, on hosts known to ``directory``.

    ``client_factory`` is given an endpoint and returns a docker-py
    client; tests use it to hand out mocks.
    """

    def __init__(self, directory, name=DEFAULT_CLUSTER_NAME,
                 settle_delay=DEFAULT_SETTLE_DELAY, client_factory=None,
                 images=None):
        self.directory = directory
        self.name = name
        self.settle_delay = settle_delay
        self.client_factory = client_factory or create_client
        self.images = dict(services.DEFAULT_IMAGES)
        self.images.update(images or {})

    def connect(self, hostname):
        endpoint = self.directory.resolve(hostname)
        client = self.client_factory(endpoint)
        return DockerConnection(
            endpoint, client, self.directory, settle_delay=self.settle_delay)

    def bootstrap_consul(self, hostnames):
        """Run a consul server on every host.

        Returns the connections of all hosts that are part of the cluster,
        the bootstrap node first. Raises :class:`IncompleteQuorumError` if
        any of the joiners failed; if the bootstrap node fails, its error
        is raised before any other host is contacted.
        """
        if not hostnames:
            raise ValueError('at least one host is required')

        quorum = quorum_size(len(hostnames))

        ctx.job('Bootstrapping consul on %s (expecting %d servers)' % (
            hostnames[0], quorum))
        bootstrap = self.connect(hostnames[0])
        bootstrap.run_image(services.consul_server(
            bootstrap.address, quorum, image=self.images['consul']))

        join = join_address(bootstrap)

        def start_joiner(connection):
            ctx.job('Joining %s to consul at %s' % (connection.name, join))
            return connection.run_image(services.consul_joiner(
                connection.address, join, image=self.images['consul']))

        outcomes = for_all_machines(self.connect, hostnames[1:], start_joiner)

        joined = [bootstrap]
        joined.extend(o.connection for o in outcomes if not o.error)
        failed = {o.hostname: o.error for o in outcomes if o.error}
        if failed:
            raise IncompleteQuorumError(failed, joined)
        return joined

    def launch_services(self, connections, discovery):
        """Start swarm and registrator on every connection.

        Unlike the consul bootstrap, the first failure aborts.
        """
        for connection in connections:
            ctx.job('Starting swarm on %s' % connection.name)
            connection.run_image(services.swarm_agent(
                connection.advertise_address(services.DOCKER_PORT),
                discovery, image=self.images['swarm']))
            connection.run_image(services.swarm_master(
                connection.advertise_address(services.SWARM_MASTER_PORT),
                discovery, image=self.images['swarm']))
            connection.save_swarm_config(self.name)

            self.start_registrator(connection)

    def start_registrator(self, connection):
        backend = '%s://%s' % (
            services.DISCOVERY_SCHEME,
            connection.advertise_address(services.CONSUL_HTTP_PORT))
        ctx.job('Starting registrator on %s' % connection.name)
        return connection.run_image(services.registrator(
            backend, image=self.images['registrator']))

    def create(self, hostnames):
        """Bootstrap consul, then start the services depending on it.
        """
        connections = self.bootstrap_consul(hostnames)
        discovery = connections[0].discovery_url(self.name)
        self.launch_services(connections, discovery)
        return connections

    def start_registrators(self, hostnames):
        """Replace the registrator container on every host."""
        def restart(connection):
            connection.remove_forcibly([services.REGISTRATOR_CONTAINER_NAME])
            return self.start_registrator(connection)
        return for_all_machines(self.connect, hostnames, restart)

    def destroy(self, hostnames):
        """Remove every container we might have started from all hosts.
        """
        def remove(connection):
            ctx.job('Destroying %s' % connection.name)
            return connection.remove_forcibly(services.ALL_CONTAINER_NAMES)
        return for_all_machines(self.connect, hostnames, remove)

    def rewrite(self, hostnames):
        """Only mark the hosts as swarm masters of this cluster in the
        machine directory.
        """
        def save(connection):
            return connection.save_swarm_config(self.name)
        return for_all_machines(self.connect, hostnames, save)
