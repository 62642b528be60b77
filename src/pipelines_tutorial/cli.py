"""
Command line entry-point

    pipelines-tutorial-demo [command] [skip-bootstrap]

The namespace comes from the `NAMESPACE` environment variable and defaults to `pipelines-tutorial`.
"""
import logging
import subprocess
import sys
import time
from typing import Mapping, Optional, Sequence

from .exceptions import DemoError, InvalidCommandError
from .handlers import OPERATIONS, build_context, run_operation, show_help
from .models import DEFAULT_LOG_LEVEL, DemoConfig

LOG = logging.getLogger("pipelines_tutorial")


def configure_logging(level: str):
    LOG.setLevel(level or "INFO")
    LOG.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    LOG.addHandler(handler)
    LOG.propagate = False


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None,
         sleep=time.sleep, out=None) -> int:
    """
    Dispatches the command to its operation

    :return int: Exit code. 0 on success, 1 for an invalid command, bad configuration, a missing tool or a failed
    validation. A failed cluster call exits with the client's own return code.
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        config = DemoConfig.from_env(environ)
    except DemoError as e:
        configure_logging(DEFAULT_LOG_LEVEL)
        LOG.error(str(e))
        return e.exit_code
    configure_logging(config.log_level)
    command = argv[0] if argv else 'help'
    ctx = build_context(config, sleep=sleep, out=out)
    LOG.debug('Running %s in namespace %s', command, config.namespace)
    try:
        operation = OPERATIONS.get(command)
        if operation is None:
            show_help(ctx)
            raise InvalidCommandError(command)
        return run_operation(operation, ctx, argv[1:])
    except DemoError as e:
        LOG.error(str(e))
        return e.exit_code
    except subprocess.CalledProcessError as e:
        LOG.error('Command %s failed with return code %s', ' '.join(e.cmd), e.returncode)
        return e.returncode or 1
    except OSError as e:
        LOG.error('%s: %s', e.strerror or e, e.filename or '')
        return 1
    except KeyboardInterrupt:
        LOG.error('Interrupted')
        return 130


def run():
    sys.exit(main())


if __name__ == '__main__':
    run()
