import pytest

from clusterator.config import Config
from clusterator.errors import ConfigError


class TestConfig(object):

    def test_defaults(self, tmpdir):
        config = Config.load(str(tmpdir.join('missing.yml')), environ={})
        assert config.cluster_name == 'barney'
        assert config.settle_delay == 0.5
        assert config.storage_path == '~/.docker/machine'
        assert config.api_version is None
        assert config.images == {}

    def test_file(self, tmpdir):
        filename = tmpdir.join('clusterator.yml')
        filename.write(
            'cluster_name: fred\n'
            'settle_delay: 2\n'
            'api_version: "1.41"\n'
            'images:\n'
            '    consul: consul:0.6\n')
        config = Config.load(str(filename), environ={})
        assert config.cluster_name == 'fred'
        assert config.settle_delay == 2.0
        assert config.api_version == '1.41'
        assert config.images == {'consul': 'consul:0.6'}

    def test_file_from_environment(self, tmpdir):
        filename = tmpdir.join('other.yml')
        filename.write('cluster_name: wilma\n')
        config = Config.load(environ={'CLUSTERATOR_CONFIG': str(filename)})
        assert config.cluster_name == 'wilma'

    def test_environment_wins(self, tmpdir):
        filename = tmpdir.join('clusterator.yml')
        filename.write('cluster_name: fred\nstorage_path: /srv/machine\n')
        config = Config.load(str(filename), environ={
            'CLUSTER_NAME': 'betty',
            'MACHINE_STORAGE_PATH': '/opt/machine',
            'SETTLE_DELAY': '0'})
        assert config.cluster_name == 'betty'
        assert config.storage_path == '/opt/machine'
        assert config.settle_delay == 0

    def test_not_a_mapping(self, tmpdir):
        filename = tmpdir.join('clusterator.yml')
        filename.write('- just\n- a list\n')
        with pytest.raises(ConfigError):
            Config.load(str(filename), environ={})

    def test_broken_yaml(self, tmpdir):
        filename = tmpdir.join('clusterator.yml')
        filename.write('cluster_name: [unclosed\n')
        with pytest.raises(ConfigError):
            Config.load(str(filename), environ={})

    def test_bad_value(self, tmpdir):
        filename = tmpdir.join('clusterator.yml')
        filename.write('settle_delay: soon\n')
        with pytest.raises(ConfigError):
            Config.load(str(filename), environ={})
