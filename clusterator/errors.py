class ClusteratorError(Exception):
    """Base class for everything that can go wrong while talking to the
    fleet. The command line turns these into a printed error and a
    non-zero exit.
    """


class ResolutionError(ClusteratorError):
    """The machine directory cannot tell us how to reach a host."""

    def __init__(self, hostname, reason):
        ClusteratorError.__init__(
            self, 'cannot resolve host %s: %s' % (hostname, reason))
        self.hostname = hostname
        self.reason = reason


class TransportError(ClusteratorError):
    """The docker engine of a host could not be talked to."""

    def __init__(self, hostname, reason):
        ClusteratorError.__init__(
            self, 'cannot reach docker on %s: %s' % (hostname, reason))
        self.hostname = hostname
        self.reason = reason


class CreationError(ClusteratorError):
    """A container could not be created, pulled or started."""

    def __init__(self, hostname, container_name, reason):
        ClusteratorError.__init__(self, 'cannot run %s/%s: %s' % (
            hostname, container_name, reason))
        self.hostname = hostname
        self.container_name = container_name
        self.reason = reason


class MachineError(ClusteratorError):
    """The virtual machine behind a host could not be started."""

    def __init__(self, hostname, reason):
        ClusteratorError.__init__(
            self, 'cannot start machine %s: %s' % (hostname, reason))
        self.hostname = hostname
        self.reason = reason


class IncompleteQuorumError(ClusteratorError):
    """Not every host managed to join the consul cluster.

    Some of the servers may very well be running; still, the cluster is
    not what the user asked for, and nothing should be built on top of it.
    ``failed`` maps host names to the error, ``joined`` holds the
    connections that did make it (bootstrap node included).
    """

    def __init__(self, failed, joined):
        ClusteratorError.__init__(
            self, 'cluster incomplete, %d of %d hosts failed to join: %s' % (
                len(failed), len(failed) + len(joined),
                ', '.join(sorted(failed))))
        self.failed = failed
        self.joined = joined


class DirectoryError(ClusteratorError):
    """A host record could not be written back to the machine directory."""

    def __init__(self, hostname, reason):
        ClusteratorError.__init__(
            self, 'cannot save host %s: %s' % (hostname, reason))
        self.hostname = hostname
        self.reason = reason


class ConfigError(ClusteratorError):
    """The configuration file is unreadable or malformed."""

    def __init__(self, filename, reason):
        ClusteratorError.__init__(self, '%s: %s' % (filename, reason))
        self.filename = filename
        self.reason = reason
