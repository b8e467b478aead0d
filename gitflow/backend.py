import asyncio
import subprocess
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from ._utils import maybe_await
from .common.repository import Repository
from .exception import ConflictError, MergeError, NotFoundError
from .logger import logger

BRANCH_REF_PREFIX = 'refs/heads/'
TAG_REF_PREFIX = 'refs/tags/'


@dataclass(frozen=True)
class Commit:
    id: str
    message: str = field(default='', compare=False)


@dataclass(frozen=True)
class Reference:
    name: str

    @property
    def shorthand(self):
        for prefix in (BRANCH_REF_PREFIX, TAG_REF_PREFIX):
            if self.name.startswith(prefix):
                return self.name[len(prefix):]
        return self.name


@dataclass(frozen=True)
class Branch:
    name: str
    target: str
    repo: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Tag:
    name: str
    target: str
    message: str = ''


@dataclass(frozen=True)
class MergeResult:
    """
    Outcome of merging a source branch into a target branch.

    Attributes:
        commit (str): the target's commit after the merge
        created (bool): False if the target already contained the source and nothing was written
    """
    commit: str
    created: bool = True


def merge_message(target_name: str, source_name: str) -> str:
    return f'Merge branch \'{source_name}\' into {target_name}'


class Backend:
    """
    Repository primitives the git-flow operations are built on, all of them coroutines.
    """

    async def get_config(self, repo) -> dict:
        raise NotImplementedError

    async def set_config(self, repo, key: str, value: str):
        raise NotImplementedError

    async def lookup_branch(self, repo, name: str) -> Branch:
        raise NotImplementedError

    async def list_references(self, repo) -> List[Reference]:
        raise NotImplementedError

    async def get_commit(self, repo, target: str) -> Commit:
        raise NotImplementedError

    async def create_branch(self, repo, name: str, commit_id: str) -> Branch:
        raise NotImplementedError

    async def checkout_branch(self, repo, branch: Branch):
        raise NotImplementedError

    async def delete_branch(self, branch: Branch):
        raise NotImplementedError

    async def merge(self, target: Branch, source: Branch, repo,
                    process_message: Optional[Callable[[str], Any]] = None) -> MergeResult:
        raise NotImplementedError

    async def create_tag(self, commit_id: str, tag_name: str, message: str, repo) -> Tag:
        raise NotImplementedError


class GitBackend(Backend):
    """
    Backend running the git command line against a :class:`Repository`.

    Every git invocation blocks, so each one runs in a worker thread.
    """

    async def get_config(self, repo: Repository) -> dict:
        return await asyncio.to_thread(repo.config)

    async def set_config(self, repo: Repository, key: str, value: str):
        await asyncio.to_thread(repo.set_config, key, value)

    async def lookup_branch(self, repo: Repository, name: str) -> Branch:
        target = await asyncio.to_thread(repo.rev_parse, BRANCH_REF_PREFIX + name)
        if target is None:
            raise NotFoundError('local branch', name)
        return Branch(name, target, repo)

    async def list_references(self, repo: Repository) -> List[Reference]:
        names = await asyncio.to_thread(repo.references)
        return [Reference(name) for name in names]

    async def get_commit(self, repo: Repository, target: str) -> Commit:
        commit_id, message = await asyncio.to_thread(repo.commit, target)
        return Commit(commit_id, message)

    async def create_branch(self, repo: Repository, name: str, commit_id: str) -> Branch:
        if await asyncio.to_thread(repo.branch_exists, name):
            raise ConflictError('branch', name)
        await asyncio.to_thread(repo.create_branch, name, commit_id)
        return Branch(name, commit_id, repo)

    async def checkout_branch(self, repo: Repository, branch: Branch):
        if await asyncio.to_thread(repo.current_branch) == branch.name:
            return
        await asyncio.to_thread(repo.checkout, branch.name)

    async def delete_branch(self, branch: Branch):
        await asyncio.to_thread(branch.repo.delete_branch, branch.name)

    async def merge(self, target: Branch, source: Branch, repo: Repository,
                    process_message: Optional[Callable[[str], Any]] = None) -> MergeResult:
        if await asyncio.to_thread(repo.is_ancestor, source.target, target.target):
            logger.info(f'\'{target.name}\' already contains \'{source.name}\', nothing to merge.')
            return MergeResult(target.target, created=False)

        message = merge_message(target.name, source.name)
        if process_message:
            message = await maybe_await(process_message(message)) or message
        try:
            commit_id = await asyncio.to_thread(repo.merge, target.name, source.name, message)
        except subprocess.CalledProcessError as e:
            raise MergeError(target.name, source.name, (e.stdout or e.stderr or str(e)).strip()) from e
        return MergeResult(commit_id)

    async def create_tag(self, commit_id: str, tag_name: str, message: str, repo: Repository) -> Tag:
        if await asyncio.to_thread(repo.tag_exists, tag_name):
            raise ConflictError('tag', tag_name)
        await asyncio.to_thread(repo.tag, tag_name, commit_id, message)
        return Tag(tag_name, commit_id, message)
