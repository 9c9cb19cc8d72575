from clint.textui import puts, indent, colored
from werkzeug.local import Local


local = Local()
ctx = local('ctx')

def set_context(ctx):
    local.ctx = ctx


class Context(object):
    """Progress reporting for a command run.

    Messages are one of three kinds, ``job`` being a header for the ``log``
    lines that follow, and ``error`` for things that went wrong.
    """

    def custom(self, **obj):
        if 'job' in obj:
            puts('-----> %s' % obj['job'])
        elif 'log' in obj:
            with indent(7):
                puts('%s' % obj['log'])
        elif 'error' in obj:
            with indent(7):
                puts(colored.red('Error: %s' % obj['error']))

    def job(self, name):
        self.custom(job=name)

    def log(self, msg):
        self.custom(log=msg)

    def error(self, msg):
        self.custom(error=msg)


set_context(Context())
