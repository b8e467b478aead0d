"""
The git-flow hotfix operations.

A hotfix branch is started from master. Finishing it merges the hotfix into the
secondary branch (develop, or the release branch in progress) and into master,
tags master, and deletes the hotfix branch unless asked to keep it.
"""
from dataclasses import dataclass, fields
from typing import Any, Callable, List, NamedTuple, Optional

from . import config as cfg
from ._utils import maybe_await, optional
from .backend import Backend, Branch, GitBackend, Reference
from .exception import AmbiguousBranchError, ValidationError
from .logger import logger


def _noop(*_):
    return None


@dataclass
class HotfixOptions:
    """
    Options of finishing a hotfix.

    Every callback may be a plain function or a coroutine function.

    Attributes:
        keep_branch (bool): keep the hotfix branch instead of deleting it
        message (str): message of the tag, defaults to "Hotfix <version>"
        process_merge_message_callback: receives the generated merge message, returns the one to commit
            (None keeps the generated one)
        before_merge_callback: called with (target branch name, hotfix branch name) before each merge
        post_develop_merge_callback: called with the develop merge commit, may return a replacement
        post_master_merge_callback: called with the master merge commit, may return a replacement
        post_release_merge_callback: called with the release merge commit, may return a replacement
        select_release_branch_callback: called with the release branch references when there are
            more than one, returns the name (or the reference) of the one to merge into
    """
    keep_branch: bool = False
    message: Optional[str] = None
    process_merge_message_callback: Optional[Callable[[str], Any]] = None
    before_merge_callback: Callable[[str, str], Any] = _noop
    post_develop_merge_callback: Callable[[str], Any] = _noop
    post_master_merge_callback: Callable[[str], Any] = _noop
    post_release_merge_callback: Callable[[str], Any] = _noop
    select_release_branch_callback: Optional[Callable[[List[Reference]], Any]] = None

    _ALIASES = {
        'keepBranch': 'keep_branch',
        'processMergeMessageCallback': 'process_merge_message_callback',
        'beforeMergeCallback': 'before_merge_callback',
        'postDevelopMergeCallback': 'post_develop_merge_callback',
        'postMasterMergeCallback': 'post_master_merge_callback',
        'postReleaseMergeCallback': 'post_release_merge_callback',
        'selectReleaseBranchCallback': 'select_release_branch_callback',
    }

    @classmethod
    def of(cls, options) -> 'HotfixOptions':
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in dict(options).items():
            name = cls._ALIASES.get(key, key)
            if name not in names:
                raise ValidationError('options', f'unknown hotfix option \'{key}\'')
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)


class SecondaryBranch(NamedTuple):
    name: str
    post_merge_callback: Callable[[str], Any]


def _validate(repo, hotfix_version):
    if repo is None:
        raise ValidationError('repo', 'Repo is required')
    if not hotfix_version:
        raise ValidationError('hotfix_version', 'Hotfix version is required')


async def start_hotfix(repo, hotfix_version: str, backend: Backend = None) -> Branch:
    """
    Starts a git flow "hotfix"

    Args:
        repo: the repository to start a hotfix in
        hotfix_version (str): the version of the hotfix to start
        backend (Backend): repository backend, git command line by default

    Returns:
        the hotfix branch, checked out
    """
    _validate(repo, hotfix_version)
    backend = backend or GitBackend()

    config = await cfg.load_config(backend, repo, cfg.PREFIX_HOTFIX, cfg.BRANCH_MASTER)
    hotfix_branch_name = config[cfg.PREFIX_HOTFIX] + hotfix_version
    master_branch_name = config[cfg.BRANCH_MASTER]

    master_branch = await backend.lookup_branch(repo, master_branch_name)
    master_commit = await backend.get_commit(repo, master_branch.target)
    logger.info(f'Start hotfix branch \'{hotfix_branch_name}\' from \'{master_branch_name}\' ({master_commit.id}).')
    hotfix_branch = await backend.create_branch(repo, hotfix_branch_name, master_commit.id)
    await backend.checkout_branch(repo, hotfix_branch)
    return hotfix_branch


async def resolve_secondary_branch(backend: Backend, repo, config: dict,
                                   options: HotfixOptions) -> SecondaryBranch:
    """
    Pick the branch the hotfix is merged into besides master.

    develop by default; the release branch if exactly one exists; the one chosen by
    the selection callback if several exist.
    """
    release_prefix = f'refs/heads/{config[cfg.PREFIX_RELEASE]}'
    references = await backend.list_references(repo)
    release_refs = [ref for ref in references if ref.name.startswith(release_prefix)]

    if len(release_refs) == 1:
        return SecondaryBranch(release_refs[0].shorthand, options.post_release_merge_callback)
    if len(release_refs) > 1:
        if options.select_release_branch_callback is None:
            raise AmbiguousBranchError([ref.shorthand for ref in release_refs])
        selected = await maybe_await(options.select_release_branch_callback(release_refs))
        if isinstance(selected, Reference):
            selected = selected.shorthand
        if not selected:
            raise ValidationError('select_release_branch_callback', 'No release branch was selected')
        logger.info(f'Selected the release branch \'{selected}\' out of {len(release_refs)}.')
        return SecondaryBranch(selected, options.post_release_merge_callback)
    return SecondaryBranch(config[cfg.BRANCH_DEVELOP], options.post_develop_merge_callback)


async def _merge_step(backend: Backend, repo, target: Branch, hotfix: Branch,
                      post_merge_callback, options: HotfixOptions) -> str:
    await maybe_await(options.before_merge_callback(target.name, hotfix.name))
    logger.info(f'Merge the hotfix branch \'{hotfix.name}\' into \'{target.name}\'.')
    result = await backend.merge(target, hotfix, repo, options.process_merge_message_callback)
    replacement = await maybe_await(post_merge_callback(result.commit))
    return replacement or result.commit


async def finish_hotfix(repo, hotfix_version: str, options=None, backend: Backend = None) -> Optional[str]:
    """
    Finishes a git flow "hotfix"

    Args:
        repo: the repository to finish a hotfix in
        hotfix_version (str): the version of the hotfix to finish
        options (HotfixOptions|dict): options for finish hotfix
        backend (Backend): repository backend, git command line by default

    Returns:
        the commit id of merging the hotfix into the secondary branch (develop or release),
        None if that merge was skipped
    """
    _validate(repo, hotfix_version)
    options = HotfixOptions.of(options)
    backend = backend or GitBackend()

    config = await cfg.load_config(backend, repo, cfg.BRANCH_DEVELOP, cfg.PREFIX_HOTFIX, cfg.BRANCH_MASTER,
                                   cfg.PREFIX_VERSION_TAG, cfg.PREFIX_RELEASE)
    hotfix_branch_name = config[cfg.PREFIX_HOTFIX] + hotfix_version
    master_branch_name = config[cfg.BRANCH_MASTER]
    tag_name = config[cfg.PREFIX_VERSION_TAG] + hotfix_version

    secondary = await resolve_secondary_branch(backend, repo, config, options)
    secondary_branch = await backend.lookup_branch(repo, secondary.name)
    hotfix_branch = await backend.lookup_branch(repo, hotfix_branch_name)
    master_branch = await backend.lookup_branch(repo, master_branch_name)

    secondary_commit = await backend.get_commit(repo, secondary_branch.target)
    hotfix_commit = await backend.get_commit(repo, hotfix_branch.target)
    master_commit = await backend.get_commit(repo, master_branch.target)

    # merging a branch into the branch pointing at the same commit is meaningless
    merge_commit = None
    if secondary_commit != hotfix_commit:
        merge_commit = await _merge_step(backend, repo, secondary_branch, hotfix_branch,
                                         secondary.post_merge_callback, options)
    else:
        logger.info(f'Skip merging into \'{secondary.name}\', it points at the hotfix commit already.')

    if master_commit != hotfix_commit:
        tag_target = await _merge_step(backend, repo, master_branch, hotfix_branch,
                                       options.post_master_merge_callback, options)
    else:
        logger.info(f'Skip merging into \'{master_branch_name}\', it points at the hotfix commit already.')
        tag_target = master_commit.id

    message = optional(options.message).or_get(f'Hotfix {hotfix_version}')
    logger.info(f'Create the tag \'{tag_name}\' on {tag_target}.')
    await backend.create_tag(tag_target, tag_name, message, repo)

    if not options.keep_branch:
        # git refuses to delete the branch checked out
        await backend.checkout_branch(repo, master_branch)
        logger.info(f'Delete the hotfix branch \'{hotfix_branch_name}\'.')
        await backend.delete_branch(hotfix_branch)

    return merge_commit
