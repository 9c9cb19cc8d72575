"""Bootstraps a consul/swarm/registrator cluster across docker-machine
hosts.
"""

__version__ = '0.1'
