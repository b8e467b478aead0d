from . import config as cfg
from . import hotfix
from .backend import Backend, GitBackend
from .exception import NotFoundError, ValidationError
from .logger import logger


class Flow:
    """
    The git-flow operations bound to one repository.

    Args:
        repo: the repository
        backend (Backend): repository backend, git command line by default
    """

    def __init__(self, repo, backend: Backend = None):
        if repo is None:
            raise ValidationError('repo', 'Repo is required')
        self.repo = repo
        self.backend = backend or GitBackend()

    @staticmethod
    async def init(repo, config: dict = None, backend: Backend = None) -> 'Flow':
        """
        Write the gitflow configuration into the repository and make sure the develop branch exists.

        Args:
            repo: the repository to initialize
            config (dict): gitflow configuration, the defaults if not given
            backend (Backend): repository backend, git command line by default
        """
        if repo is None:
            raise ValidationError('repo', 'Repo is required')
        config = {**cfg.get_config_default(), **(config or {})}
        cfg.validate_config(config)
        backend = backend or GitBackend()

        for key in cfg.get_config_keys():
            await backend.set_config(repo, key, config[key])

        master_branch = await backend.lookup_branch(repo, config[cfg.BRANCH_MASTER])
        develop_branch_name = config[cfg.BRANCH_DEVELOP]
        try:
            await backend.lookup_branch(repo, develop_branch_name)
        except NotFoundError:
            logger.info(f'Create the develop branch \'{develop_branch_name}\' from \'{master_branch.name}\'.')
            await backend.create_branch(repo, develop_branch_name, master_branch.target)
        return Flow(repo, backend)

    async def config(self) -> dict:
        return await cfg.load_config(self.backend, self.repo)

    async def start_hotfix(self, hotfix_version: str):
        return await hotfix.start_hotfix(self.repo, hotfix_version, backend=self.backend)

    async def finish_hotfix(self, hotfix_version: str, options=None):
        return await hotfix.finish_hotfix(self.repo, hotfix_version, options, backend=self.backend)
