from .exception import NotFoundError, ValidationError

BRANCH_MASTER = 'gitflow.branch.master'
BRANCH_DEVELOP = 'gitflow.branch.develop'
PREFIX_FEATURE = 'gitflow.prefix.feature'
PREFIX_RELEASE = 'gitflow.prefix.release'
PREFIX_HOTFIX = 'gitflow.prefix.hotfix'
PREFIX_VERSION_TAG = 'gitflow.prefix.versiontag'

_DEFAULTS = {
    BRANCH_MASTER: 'master',
    BRANCH_DEVELOP: 'develop',
    PREFIX_FEATURE: 'feature/',
    PREFIX_RELEASE: 'release/',
    PREFIX_HOTFIX: 'hotfix/',
    PREFIX_VERSION_TAG: '',
}


def get_config_default() -> dict:
    return dict(_DEFAULTS)


def get_config_keys() -> list:
    return list(_DEFAULTS.keys())


def validate_config(config: dict):
    """
    Check a gitflow configuration before writing it into a repository.

    Branch names must be non-empty, prefixes may be empty but must be present.
    """
    if not config:
        raise ValidationError('config', 'gitflow config is required')
    missing = [key for key in get_config_keys() if config.get(key) is None]
    if missing:
        raise ValidationError('config', f'gitflow config is missing the keys: {", ".join(missing)}')
    for key in (BRANCH_MASTER, BRANCH_DEVELOP):
        if not config[key]:
            raise ValidationError('config', f'gitflow config \'{key}\' must not be empty')
    if config[BRANCH_MASTER] == config[BRANCH_DEVELOP]:
        raise ValidationError('config', 'the master branch and the develop branch must be different')


async def load_config(backend, repo, *keys) -> dict:
    """
    Read the gitflow configuration of the repository once.

    Args:
        backend (Backend): repository backend
        repo: the repository
        keys (str): keys the caller needs, all of them if not given

    Returns:
        the configuration, restricted to the gitflow keys
    """
    values = await backend.get_config(repo)
    required = keys or get_config_keys()
    missing = [key for key in required if key not in values]
    if missing:
        raise NotFoundError('config', ', '.join(missing),
                            f'Missing gitflow config {", ".join(missing)}, initialize git-flow first')
    return {key: values[key] for key in get_config_keys() if key in values}
