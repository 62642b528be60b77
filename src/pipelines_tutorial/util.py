"""
Set of utility functions used by the demo commands
"""
import logging
import subprocess
from typing import List, Optional, Sequence

from ruamel.yaml import YAML

from .exceptions import MissingToolError
from .models import NAMESPACE_TOKEN

LOG = logging.getLogger(__name__)
log = LOG  # alias


def run_process(cmd: Sequence[str], input: Optional[str] = None, log_errors: bool = True):
    """
    Run a command as a sub-process and capture its output

    :param cmd: Command to run, as an argument list
    :param input: Text passed to the command on stdin
    :param log_errors: Log failures at ERROR level. Polling callers expect failures and turn this off
    :return: The completed sub-process object
    """
    log.debug("running cmd: %s", ' '.join(cmd))
    try:
        proc = subprocess.run(list(cmd), capture_output=True, input=input, text=True)
        proc.check_returncode()
        log.debug(f'Return code: {proc.returncode}')
        log.debug(f'Stdout: {proc.stdout}')
        log.debug(f'Stderr: {proc.stderr}')
        return proc
    except subprocess.CalledProcessError as e:
        if log_errors:
            log.error("Error Detected on cmd {} with error {}".format(' '.join(e.cmd), e.stderr))
            log.error(e.stdout)
        raise
    except OSError as e:
        if log_errors:
            log.error("Error Detected on cmd {}".format(' '.join(cmd)))
            log.error("OSError: {}".format(e.errno))
            log.error(e.strerror)
            log.error(e.filename)
        _raise_if_missing_binary(cmd, e)
        raise


def stream_process(cmd: Sequence[str]):
    """
    Run a command as a sub-process with its output going straight to the terminal. Used for log following and
    rollout waits, which block until the cluster reports completion.

    :param cmd: Command to run, as an argument list
    :return: The completed sub-process object
    """
    log.debug("streaming cmd: %s", ' '.join(cmd))
    try:
        return subprocess.run(list(cmd), check=True)
    except subprocess.CalledProcessError as e:
        log.error("Command {} exited with return code {}".format(' '.join(e.cmd), e.returncode))
        raise
    except OSError as e:
        _raise_if_missing_binary(cmd, e)
        raise


def _raise_if_missing_binary(cmd: Sequence[str], error: OSError):
    """
    A client binary that can not be found surfaces as MissingToolError rather than a bare OSError
    """
    if isinstance(error, FileNotFoundError) and error.filename == cmd[0]:
        raise MissingToolError(f"no {cmd[0]} binary found") from error


def validate_tools(oc: str, tkn: str):
    """
    Checks that both the pipeline client and the OpenShift client can be run

    :param oc: The OpenShift Client binary
    :param tkn: The Tekton Client binary
    :raises MissingToolError: if either binary is missing or broken
    """
    log.info("validating tools")
    for binary, check in ((tkn, [tkn, 'version']), (oc, [oc, 'version', '--client'])):
        try:
            run_process(check, log_errors=False)
        except (subprocess.CalledProcessError, OSError) as e:
            raise MissingToolError(f"no {binary} binary found") from e


def substitute_namespace(text: str, namespace: str, token: str = NAMESPACE_TOKEN) -> str:
    """
    Replaces every occurrence of the default namespace token with the active namespace.

    This is a plain substring replacement over the whole document, so the token is also replaced inside any
    unrelated text that happens to contain it.
    """
    return text.replace(token, namespace)


def render_manifest(path: str, namespace: str) -> str:
    """
    Reads a manifest file and swaps the default namespace for the active one

    :param path: Path to the manifest
    :param namespace: The active namespace
    :return str: The manifest text, ready to apply
    """
    with open(path, 'r') as f:
        content = f.read()
    return substitute_namespace(content, namespace)


def parse_manifest(text: str) -> List[dict]:
    """
    Parses a (possibly multi-document) manifest. Raises ruamel's YAMLError when the text is not valid YAML.
    """
    yaml = YAML(typ='safe')
    return [doc for doc in yaml.load_all(text) if doc]


def describe_manifest(text: str) -> List[str]:
    """
    :return List[str]: `Kind/name` for every document in the manifest
    """
    described = []
    for doc in parse_manifest(text):
        metadata = doc.get('metadata') or {}
        described.append(f"{doc.get('kind', 'Unknown')}/{metadata.get('name', '')}")
    return described
