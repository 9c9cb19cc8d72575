"""Access to the docker-machine store.

Every host is a record (the ``config.json`` docker-machine keeps for it).
The rest of the code only ever asks the directory to resolve a name into
an :class:`Endpoint`, and to save a record back; which is what makes it
possible to run everything against an in-memory directory.
"""

import json
import os
from collections import namedtuple
from os import path
from subprocess import check_output, CalledProcessError

from clusterator.errors import ResolutionError, MachineError, DirectoryError


DOCKER_PORT = 2376


Endpoint = namedtuple(
    'Endpoint', ['name', 'url', 'ca_cert', 'client_cert', 'client_key'])


def mark_swarm_master(record, discovery):
    """Flag the record as a swarm master of the cluster at ``discovery``.
    """
    host_options = record.setdefault('HostOptions', {})
    swarm = host_options.setdefault('SwarmOptions', {})
    swarm['IsSwarm'] = True
    swarm['Master'] = True
    swarm['Discovery'] = discovery
    return record


class HostDirectory(object):
    """Knows all hosts by name.

    load(name) -> record
        Return the stored record of the host, raise
        :class:`ResolutionError` if there is none.

    save(name, record)
        Store the record, raise :class:`DirectoryError` if that fails.

    start(name)
        Boot the machine of the host.
    """

    def load(self, name):
        raise NotImplementedError()

    def save(self, name, record):
        raise NotImplementedError()

    def start(self, name):
        raise NotImplementedError()

    def resolve(self, name):
        record = self.load(name)

        ip = (record.get('Driver') or {}).get('IPAddress')
        if not ip:
            raise ResolutionError(name, 'no ip address recorded')

        auth = (record.get('HostOptions') or {}).get('AuthOptions') or {}
        return Endpoint(
            name=name,
            url='tcp://%s:%s' % (ip, DOCKER_PORT),
            ca_cert=auth.get('CaCertPath'),
            client_cert=auth.get('ClientCertPath'),
            client_key=auth.get('ClientKeyPath'))


class MachineDirectory(HostDirectory):
    """The on-disk store of docker-machine, usually ``~/.docker/machine``.
    """

    def __init__(self, storage_path):
        self.storage_path = path.abspath(path.expanduser(storage_path))

    def record_path(self, name):
        return path.join(self.storage_path, 'machines', name, 'config.json')

    def load(self, name):
        filename = self.record_path(name)
        if not path.exists(filename):
            raise ResolutionError(name, 'no such machine in %s' % self.storage_path)
        try:
            with open(filename, 'r') as f:
                return json.load(f)
        except (IOError, ValueError) as e:
            raise ResolutionError(name, e)

    def save(self, name, record):
        filename = self.record_path(name)
        # Replace atomically.
        tmpname = filename + '.tmp'
        try:
            with open(tmpname, 'w') as f:
                json.dump(record, f, indent=4)
            os.rename(tmpname, filename)
        except (IOError, OSError) as e:
            if path.isfile(tmpname):
                os.remove(tmpname)
            raise DirectoryError(name, e)

    def start(self, name):
        try:
            return check_output(['docker-machine', 'start', name])
        except (CalledProcessError, OSError) as e:
            raise MachineError(name, e)
