import os
from os import path

import yaml

from clusterator.cluster import DEFAULT_CLUSTER_NAME
from clusterator.connection import DEFAULT_SETTLE_DELAY
from clusterator.errors import ConfigError


DEFAULT_CONFIG_FILE = '~/.clusterator.yml'
DEFAULT_STORAGE_PATH = '~/.docker/machine'


class Config(object):
    """Settings, read from a YAML file and the environment.

    Example file::

        cluster_name: barney
        settle_delay: 0.5
        images:
            consul: progrium/consul
    """

    def __init__(self, data=None, environ=None):
        data = data or {}
        environ = os.environ if environ is None else environ

        self.cluster_name = environ.get(
            'CLUSTER_NAME', data.get('cluster_name', DEFAULT_CLUSTER_NAME))
        self.settle_delay = float(environ.get(
            'SETTLE_DELAY', data.get('settle_delay', DEFAULT_SETTLE_DELAY)))
        self.storage_path = environ.get(
            'MACHINE_STORAGE_PATH',
            data.get('storage_path', DEFAULT_STORAGE_PATH))
        self.api_version = data.get('api_version')
        self.timeout = int(data.get('timeout', 60))
        self.images = dict(data.get('images') or {})

    @classmethod
    def load(cls, filename=None, environ=None):
        environ = os.environ if environ is None else environ
        filename = path.expanduser(
            filename or environ.get('CLUSTERATOR_CONFIG', DEFAULT_CONFIG_FILE))

        data = {}
        if path.exists(filename):
            try:
                with open(filename, 'r') as f:
                    data = yaml.safe_load(f) or {}
            except (IOError, yaml.YAMLError) as e:
                raise ConfigError(filename, e)
        if not isinstance(data, dict):
            raise ConfigError(filename, 'expected a mapping')
        try:
            return cls(data, environ=environ)
        except (TypeError, ValueError) as e:
            raise ConfigError(filename, e)
