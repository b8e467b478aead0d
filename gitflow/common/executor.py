import os
import shlex
import subprocess

import paramiko

from .._utils import optional
from ..logger import logger


class Executor(object):

    def git(self, command: str, **kwargs):
        raise NotImplementedError

    def abspath(self, path: str, subpath: str = ''):
        raise NotImplementedError

    def execute(self, command: str, *, cwd=None, **kwargs):
        raise NotImplementedError


class EmptyExecutor(Executor):

    def __init__(self, *, git_executor: str = 'git {}'):
        """
        Executor for git, subclasses decide where the command runs.

        Args:
            git_executor (str): the git executor pattern, ex: git {}
        """
        self._git_executor = git_executor

    def git(self, command: str, **kwargs):
        return self.execute(self._git_executor.format(command), **kwargs)

    def abspath(self, path: str, subpath: str = ''):
        raise NotImplementedError

    def execute(self, command: str, *, cwd=None, **kwargs):
        raise NotImplementedError


class LocalExecutor(EmptyExecutor):

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

    def abspath(self, path: str, subpath: str = ''):
        return os.path.abspath(os.path.join(os.path.expanduser(path), subpath))

    def execute(self, command: str, *, cwd=None, **kwargs):
        logger.info(f'Execute local command: "{command}"' + optional(cwd).format(' in directory {}'))
        return subprocess.run(command, cwd=cwd, **{'shell': True, 'check': True, **kwargs})


class RemoteExecutor(EmptyExecutor):

    def __init__(self, host: str, *, user: str = None, password: str = None, private_key: str = None, **kwargs):
        super().__init__(**kwargs)
        self.ssh = RemoteExecutor._ssh_client(host, user, password, private_key)

    def abspath(self, path: str, subpath: str = ''):
        ret = self.execute(f'readlink -fm {shlex.quote(f"{path}/{subpath}")}')
        return str(ret.stdout).strip()

    def execute(self, command: str, *, cwd=None, check=True, **kwargs):
        logger.info(f'Execute remote command: "{command}"' + optional(cwd).format(' in directory {}'))
        if cwd:
            command = f'cd {shlex.quote(cwd)} && {command}'
        _, stdout, stderr = self.ssh.exec_command(command)
        error = ''.join(stderr.readlines())
        output = ''.join(stdout.readlines())
        exit_status = stdout.channel.recv_exit_status()
        if exit_status != 0 and check:
            logger.error('error: ' + error)
            raise subprocess.CalledProcessError(returncode=exit_status, cmd=command, output=output, stderr=error)
        return subprocess.CompletedProcess(args=command, returncode=exit_status, stdout=output, stderr=error)

    @staticmethod
    def _ssh_client(host: str, user: str = None, password: str = None, private_key: str = None):
        ssh = paramiko.SSHClient()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy)
        ssh.load_system_host_keys()
        ssh.connect(host, username=user, password=password, key_filename=private_key)
        return ssh

    def _close(self):
        hasattr(self, 'ssh') and self.ssh.close()

    def __enter__(self):
        return self

    def __exit__(self, type, value, traceback):
        self._close()

    def __del__(self):
        self._close()


class ProxyExecutor(Executor):

    def __init__(self, **kwargs):
        """
        Run git locally, or on the remote "host" over ssh when one is configured.

        Args:
            host (str): remote host, runs locally if absent
            user (str): ssh user name
            password (str): ssh password
            private_key (str): path of the ssh private key
            git_executor (str): the git executor pattern, ex: git {}
        """
        kwargs = {k: v for k, v in kwargs.items() if v is not None}
        kwargs.pop('paramiko', None)
        if not kwargs.get('host'):
            kwargs = {k: v for k, v in kwargs.items() if k == 'git_executor'}
            self._proxy_executor = LocalExecutor(**kwargs)
        else:
            self._proxy_executor = RemoteExecutor(**kwargs)

    def git(self, command: str, **kwargs):
        return self._proxy_executor.git(command, **kwargs)

    def abspath(self, path: str, subpath: str = ''):
        return self._proxy_executor.abspath(path, subpath)

    def execute(self, command: str, *, cwd=None, **kwargs):
        return self._proxy_executor.execute(command, cwd=cwd, **kwargs)

    def is_local_proxy(self):
        return type(self._proxy_executor) == LocalExecutor

    def _close(self):
        if hasattr(self, '_proxy_executor') and type(self._proxy_executor) == RemoteExecutor:
            # noinspection PyProtectedMember
            self._proxy_executor._close()

    def __enter__(self):
        return self

    def __exit__(self, type, value, traceback):
        self._close()

    def __del__(self):
        self._close()
