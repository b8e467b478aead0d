import shlex
import subprocess

from .executor import Executor
from ..logger import logger

_CAPTURE = {'stdout': subprocess.PIPE, 'stderr': subprocess.PIPE, 'encoding': 'UTF-8'}


class Repository:
    def __init__(self, executor: Executor, directory: str):
        """
        the directory of workspace, can be a relative path against the current work directory.

        Args:
            executor (Executor): executor for git
            directory (str): directory name or path
        """
        self._executor = executor
        self._directory = executor.abspath(directory)

    @property
    def directory(self):
        return self._directory

    def config(self, pattern: str = r'^gitflow\.') -> dict:
        ret = self._execute(f'config --get-regexp {shlex.quote(pattern)}', check=False)
        # exit code 1 means no key matched
        if ret.returncode not in (0, 1):
            raise subprocess.CalledProcessError(ret.returncode, ret.args, ret.stdout, ret.stderr)
        values = {}
        for line in ret.stdout.splitlines():
            key, _, value = line.partition(' ')
            values[key] = value
        return values

    def set_config(self, key: str, value: str):
        self._execute(f'config {shlex.quote(key)} {shlex.quote(str(value))}')

    def rev_parse(self, ref: str):
        """
        Returns the commit id the ref points at, or None if it doesn't resolve.
        """
        ret = self._execute(f'rev-parse --verify -q {shlex.quote(ref + "^{commit}")}', check=False)
        return ret.stdout.strip() if ret.returncode == 0 else None

    def branch_exists(self, branch: str):
        return self.rev_parse(f'refs/heads/{branch}') is not None

    def tag_exists(self, tag: str):
        return self.rev_parse(f'refs/tags/{tag}') is not None

    def references(self) -> list:
        return self._execute('for-each-ref --format="%(refname)"').stdout.split()

    def commit(self, target: str):
        """
        Returns a tuple of the commit id and its message (without the trailing newline).
        """
        ret = self._execute(f'show -s --format=%H%n%B {shlex.quote(target)}')
        commit_id, _, message = ret.stdout.partition('\n')
        return commit_id, message.rstrip('\n')

    def current_branch(self):
        ret = self._execute('symbolic-ref -q --short HEAD', check=False)
        return ret.stdout.strip() if ret.returncode == 0 else None

    def create_branch(self, branch: str, start_point: str):
        self._execute(f'branch --no-track {shlex.quote(branch)} {shlex.quote(start_point)}')

    def checkout(self, branch: str):
        self._execute(f'checkout {shlex.quote(branch)}')

    def delete_branch(self, branch: str):
        self._execute(f'branch -D {shlex.quote(branch)}')

    def is_ancestor(self, ancestor: str, descendant: str):
        ret = self._execute(f'merge-base --is-ancestor {shlex.quote(ancestor)} {shlex.quote(descendant)}',
                            check=False)
        return ret.returncode == 0

    def merge(self, target: str, source: str, message: str):
        """
        Merge the branch "source" into "target" with a merge commit, leaves "target" checked out.

        Returns:
            the id of the merge commit
        """
        self.checkout(target)
        ret = self._execute(f'merge --no-ff --no-edit -m {shlex.quote(message)} {shlex.quote(source)}', check=False)
        if ret.returncode != 0:
            logger.info(f'Abort merging \'{source}\' into \'{target}\'.')
            self._execute('merge --abort', check=False)
            raise subprocess.CalledProcessError(ret.returncode, ret.args, ret.stdout, ret.stderr)
        return self.rev_parse('HEAD')

    def tag(self, tag: str, commit: str, message: str):
        self._execute(f'tag -a {shlex.quote(tag)} -m {shlex.quote(message)} {shlex.quote(commit)}')

    def _execute(self, command: str, **kwargs):
        default_kwargs = {
            'cwd': self._directory,
            **_CAPTURE,
            **kwargs
        }
        return self._executor.git(command, **default_kwargs)
