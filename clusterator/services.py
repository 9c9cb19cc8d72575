"""The containers that make up a cluster.

A :class:`ContainerSpec` is the flat, final configuration of a single
container; the functions below put one together for each of the roles a
host plays. The container names are fixed, such that ``destroy`` can find
what ``create`` started.
"""

from collections import namedtuple

from docker.types import LogConfig


CONSUL_CONTAINER_NAME = 'clusterator_consul'
SWARM_AGENT_CONTAINER_NAME = 'clusterator_swarm_agent'
SWARM_MASTER_CONTAINER_NAME = 'clusterator_swarm_master'
REGISTRATOR_CONTAINER_NAME = 'clusterator_registrator'

ALL_CONTAINER_NAMES = (
    CONSUL_CONTAINER_NAME,
    SWARM_AGENT_CONTAINER_NAME,
    SWARM_MASTER_CONTAINER_NAME,
    REGISTRATOR_CONTAINER_NAME,
)

DEFAULT_IMAGES = {
    'consul': 'progrium/consul',
    'swarm': 'swarm',
    'registrator': 'gliderlabs/registrator',
}

CONSUL_SERF_LAN_PORT = 8301
CONSUL_HTTP_PORT = 8500
DOCKER_PORT = 2376
SWARM_MASTER_PORT = 3376

DISCOVERY_SCHEME = 'consul'

# Where docker-machine puts the engine certificates on boot2docker hosts.
CERT_DIR = '/var/lib/boot2docker'
DOCKER_SOCKET = '/var/run/docker.sock'


def default_log_config():
    return LogConfig(type=LogConfig.types.JSON, config={
        'max-size': '10m',
        'max-file': '5',
    })


class ContainerSpec(namedtuple('ContainerSpec', [
        'name', 'image', 'command', 'network_mode', 'log_config',
        'restart_policy', 'binds', 'port_bindings'])):
    """Everything needed to create one container.
    """

    def __new__(cls, name, image, command, network_mode='host',
                log_config=None, restart_policy=None, binds=None,
                port_bindings=None):
        return super(ContainerSpec, cls).__new__(
            cls, name, image, tuple(command), network_mode,
            log_config or default_log_config(),
            restart_policy or {'Name': 'always'},
            tuple(binds or ()),
            dict(port_bindings or {}))

    def create_kwargs(self, client):
        """The arguments to pass to ``create_container`` of docker-py.
        """
        host_config = client.create_host_config(
            network_mode=self.network_mode,
            log_config=self.log_config,
            restart_policy=self.restart_policy,
            binds=list(self.binds) or None,
            port_bindings=self.port_bindings or None)
        return dict(
            image=self.image,
            command=list(self.command),
            name=self.name,
            # Ports need to be declared on create for the bindings to apply.
            ports=list(self.port_bindings.keys()) or None,
            host_config=host_config)


def consul_server(ip, quorum, image=DEFAULT_IMAGES['consul']):
    """The consul server that bootstraps the cluster, waiting for
    ``quorum`` servers to show up.
    """
    return ContainerSpec(
        CONSUL_CONTAINER_NAME, image,
        ['-server', '-bind', ip, '-bootstrap-expect', str(quorum)])


def consul_joiner(ip, join, image=DEFAULT_IMAGES['consul']):
    """A consul server joining the cluster through ``join`` (ip:port).
    """
    return ContainerSpec(
        CONSUL_CONTAINER_NAME, image,
        ['-server', '-bind', ip, '-join', join])


def swarm_agent(advertise, discovery, image=DEFAULT_IMAGES['swarm']):
    return ContainerSpec(
        SWARM_AGENT_CONTAINER_NAME, image,
        ['join', '--advertise', advertise, discovery])


def swarm_master(advertise, discovery, image=DEFAULT_IMAGES['swarm']):
    """The swarm manager, talking TLS with the same certificates the
    docker engine of the host uses.
    """
    return ContainerSpec(
        SWARM_MASTER_CONTAINER_NAME, image,
        ['manage',
         '--tlsverify',
         '--tlscacert=%s/ca.pem' % CERT_DIR,
         '--tlscert=%s/server.pem' % CERT_DIR,
         '--tlskey=%s/server-key.pem' % CERT_DIR,
         '-H', 'tcp://0.0.0.0:%s' % SWARM_MASTER_PORT,
         '--strategy', 'spread',
         '--advertise', advertise,
         discovery],
        network_mode='bridge',
        binds=['%s:%s:ro' % (CERT_DIR, CERT_DIR)],
        port_bindings={SWARM_MASTER_PORT: SWARM_MASTER_PORT})


def registrator(backend, image=DEFAULT_IMAGES['registrator']):
    """Registers the containers of the host with consul at ``backend``.
    """
    return ContainerSpec(
        REGISTRATOR_CONTAINER_NAME, image,
        [backend],
        binds=['%s:/tmp/docker.sock' % DOCKER_SOCKET])
