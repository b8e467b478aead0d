import itertools
import shutil
import subprocess

import pytest

from gitflow import config as cfg
from gitflow._utils import maybe_await
from gitflow.backend import Backend, Branch, Commit, MergeResult, Reference, Tag, merge_message
from gitflow.common.executor import LocalExecutor
from gitflow.common.repository import Repository
from gitflow.exception import ConflictError, NotFoundError

requires_git = pytest.mark.skipif(shutil.which('git') is None, reason='git is not installed')


class FakeRepo:
    """
    In-memory repository: branches point at commit ids, commits know their parents.
    """
    _ids = itertools.count(1)

    def __init__(self, config: dict = None):
        self.config = dict(cfg.get_config_default() if config is None else config)
        self.commits = {}
        self.branches = {}
        self.tags = {}
        self.head = None

    def new_commit(self, message: str, *parents: str) -> str:
        commit_id = f'{next(FakeRepo._ids):040x}'
        self.commits[commit_id] = (message, list(parents))
        return commit_id

    def commit(self, branch: str, message: str) -> str:
        parents = [self.branches[branch]] if branch in self.branches else []
        self.branches[branch] = self.new_commit(message, *parents)
        return self.branches[branch]

    def message(self, commit_id: str) -> str:
        return self.commits[commit_id][0]

    def parents(self, commit_id: str) -> list:
        return self.commits[commit_id][1]

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        pending = [descendant]
        while pending:
            current = pending.pop()
            if current == ancestor:
                return True
            pending.extend(self.parents(current))
        return False


class FakeBackend(Backend):
    """
    Backend over a FakeRepo, recording every call as (method name, arguments).
    """

    def __init__(self):
        self.calls = []

    def called(self, name):
        return [args for method, args in self.calls if method == name]

    async def get_config(self, repo):
        self.calls.append(('get_config', ()))
        return dict(repo.config)

    async def set_config(self, repo, key, value):
        self.calls.append(('set_config', (key, value)))
        repo.config[key] = value

    async def lookup_branch(self, repo, name):
        self.calls.append(('lookup_branch', (name,)))
        if name not in repo.branches:
            raise NotFoundError('local branch', name)
        return Branch(name, repo.branches[name], repo)

    async def list_references(self, repo):
        self.calls.append(('list_references', ()))
        return [Reference(f'refs/heads/{name}') for name in repo.branches] + \
               [Reference(f'refs/tags/{name}') for name in repo.tags]

    async def get_commit(self, repo, target):
        self.calls.append(('get_commit', (target,)))
        return Commit(target, repo.message(target))

    async def create_branch(self, repo, name, commit_id):
        self.calls.append(('create_branch', (name, commit_id)))
        if name in repo.branches:
            raise ConflictError('branch', name)
        repo.branches[name] = commit_id
        return Branch(name, commit_id, repo)

    async def checkout_branch(self, repo, branch):
        self.calls.append(('checkout_branch', (branch.name,)))
        repo.head = branch.name

    async def delete_branch(self, branch):
        self.calls.append(('delete_branch', (branch.name,)))
        if branch.repo.head == branch.name:
            raise RuntimeError(f'cannot delete the checked out branch {branch.name}')
        del branch.repo.branches[branch.name]

    async def merge(self, target, source, repo, process_message=None):
        self.calls.append(('merge', (target.name, source.name)))
        if repo.is_ancestor(source.target, target.target):
            return MergeResult(target.target, created=False)
        message = merge_message(target.name, source.name)
        if process_message:
            message = await maybe_await(process_message(message)) or message
        commit_id = repo.new_commit(message, target.target, source.target)
        repo.branches[target.name] = commit_id
        repo.head = target.name
        return MergeResult(commit_id)

    async def create_tag(self, commit_id, tag_name, message, repo):
        self.calls.append(('create_tag', (commit_id, tag_name, message)))
        if tag_name in repo.tags:
            raise ConflictError('tag', tag_name)
        repo.tags[tag_name] = Tag(tag_name, commit_id, message)
        return repo.tags[tag_name]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def repo():
    """
    Initialized repository: master and develop on the initial commit.
    """
    r = FakeRepo()
    r.commit('master', 'initial commit')
    r.branches['develop'] = r.branches['master']
    r.head = 'master'
    return r


def git(directory, *args) -> str:
    return subprocess.run(['git', *args], cwd=directory, check=True,
                          stdout=subprocess.PIPE, encoding='UTF-8').stdout.strip()


def commit_file(directory, name: str, content: str, message: str) -> str:
    (directory / name).write_text(content)
    git(directory, 'add', name)
    git(directory, 'commit', '-q', '-m', message)
    return git(directory, 'rev-parse', 'HEAD')


@pytest.fixture
def git_repo(tmp_path):
    """
    Real git repository on master with one commit, not initialized for git-flow yet.
    """
    directory = tmp_path / 'hotfixRepo'
    directory.mkdir()
    git(directory, 'init', '-q')
    git(directory, 'symbolic-ref', 'HEAD', 'refs/heads/master')
    for key, value in (('user.email', 'flow@example.com'), ('user.name', 'Flow'),
                       ('commit.gpgsign', 'false'), ('tag.gpgsign', 'false')):
        git(directory, 'config', key, value)
    commit_file(directory, 'foobar.js', 'Line1\nLine2\nLine3', 'initial commit')
    return Repository(LocalExecutor(), str(directory))
