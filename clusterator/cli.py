#!/usr/bin/env python
import functools
import json
import sys

import click

from clusterator import context
from clusterator.cluster import Cluster
from clusterator.config import Config
from clusterator.connection import DockerURL, create_client
from clusterator.errors import ClusteratorError
from clusterator.machine import MachineDirectory


class App(object):
    """What the commands work with: the configuration, the machine
    directory and the cluster.
    """

    def __init__(self, config, directory=None, client_factory=None):
        self.config = config
        self.directory = directory or MachineDirectory(config.storage_path)
        if client_factory is None:
            client_factory = functools.partial(
                create_client,
                api_version=config.api_version, timeout=config.timeout)
        self.cluster = Cluster(
            self.directory,
            name=config.cluster_name,
            settle_delay=config.settle_delay,
            client_factory=client_factory,
            images=config.images)


def fatal_errors(f):
    """Turn our errors into a click failure (printed, non-zero exit)."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ClusteratorError as e:
            raise click.ClickException(str(e))
    return wrapper


def check_outcomes(outcomes):
    failed = [o.hostname for o in outcomes if o.error]
    if failed:
        raise click.ClickException('Failed on: %s' % ', '.join(failed))


@click.group()
@click.option('--config', 'config_file', default=None, type=click.Path(),
              help='YAML configuration file.')
@click.pass_context
def main(ctx, config_file):
    if ctx.obj is None:
        try:
            ctx.obj = App(Config.load(config_file))
        except ClusteratorError as e:
            raise click.ClickException(str(e))
    context.set_context(context.Context())


@main.command()
@click.argument('hosts', nargs=-1, required=True)
@click.pass_obj
@fatal_errors
def create(app, hosts):
    """Bootstrap consul, then start swarm and registrator on all hosts.

    The first host bootstraps the consul cluster.
    """
    app.cluster.create(list(hosts))


@main.command()
@click.argument('hosts', nargs=-1, required=True)
@click.pass_obj
@fatal_errors
def consul(app, hosts):
    """Bootstrap only the consul cluster."""
    app.cluster.bootstrap_consul(list(hosts))


@main.command()
@click.argument('hosts', nargs=-1, required=True)
@click.pass_obj
@fatal_errors
def registrator(app, hosts):
    """(Re)start registrator on all hosts."""
    check_outcomes(app.cluster.start_registrators(list(hosts)))


@main.command()
@click.argument('hosts', nargs=-1, required=True)
@click.pass_obj
@fatal_errors
def destroy(app, hosts):
    """Remove all cluster containers from the hosts."""
    check_outcomes(app.cluster.destroy(list(hosts)))


@main.command()
@click.argument('hosts', nargs=-1, required=True)
@click.pass_obj
@fatal_errors
def rewrite(app, hosts):
    """Mark the hosts as swarm masters in the machine store."""
    check_outcomes(app.cluster.rewrite(list(hosts)))


@main.command()
@click.argument('hosts', nargs=-1, required=True)
@click.pass_obj
@fatal_errors
def ip(app, hosts):
    """Print the address of each host."""
    for host in hosts:
        endpoint = app.directory.resolve(host)
        click.echo('%s %s' % (host, DockerURL(endpoint.url).host))


@main.command('json')
@click.argument('host')
@click.pass_obj
@fatal_errors
def print_json(app, host):
    """Print the machine store record of a host."""
    click.echo(json.dumps(app.directory.load(host), indent=4, sort_keys=True))


@main.command()
@click.argument('host')
@click.pass_obj
@fatal_errors
def config(app, host):
    """Print the docker client flags to talk to a host."""
    endpoint = app.directory.resolve(host)
    click.echo('--tlsverify')
    click.echo('--tlscacert="%s"' % endpoint.ca_cert)
    click.echo('--tlscert="%s"' % endpoint.client_cert)
    click.echo('--tlskey="%s"' % endpoint.client_key)
    click.echo('-H=%s' % endpoint.url)


@main.command()
@click.argument('hosts', nargs=-1, required=True)
@click.pass_obj
@fatal_errors
def url(app, hosts):
    """Print the docker url of each host."""
    for host in hosts:
        click.echo(app.directory.resolve(host).url)


@main.command()
@click.argument('host')
@click.pass_obj
@fatal_errors
def ps(app, host):
    """List the ids of all containers on a host."""
    connection = app.cluster.connect(host)
    for container in connection.containers():
        click.echo(container['Id'])


@main.command()
@click.argument('hosts', nargs=-1, required=True)
@click.pass_obj
@fatal_errors
def startmachines(app, hosts):
    """Boot the virtual machines of the hosts."""
    failed = []
    for host in hosts:
        context.ctx.job('Starting %s' % host)
        try:
            app.directory.start(host)
        except ClusteratorError as e:
            context.ctx.error(e)
            failed.append(host)
    if failed:
        raise click.ClickException('Failed on: %s' % ', '.join(failed))


def run():
    sys.exit(main(sys.argv[1:]) or None)


if __name__ == '__main__':
    run()
