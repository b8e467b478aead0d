from .backend import Backend, Branch, Commit, GitBackend, MergeResult, Reference, Tag, merge_message
from .common.executor import LocalExecutor, ProxyExecutor, RemoteExecutor
from .common.repository import Repository
from .config import get_config_default
from .exception import (AmbiguousBranchError, ConflictError, GitFlowError, MergeError, NotFoundError,
                        ValidationError)
from .flow import Flow
from .hotfix import HotfixOptions, finish_hotfix, start_hotfix
