class GitFlowError(Exception):

    """
    Base class of the errors raised by the git-flow operations.

    Attributes:
        message (str): error message
    """
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class ValidationError(GitFlowError, ValueError):

    """
    Exception raised when a required argument is missing or empty, before touching the repository.

    Attributes:
        argument (str): argument name
    """
    def __init__(self, argument: str, message: str = None):
        self.argument = argument
        super().__init__(message or f'{argument} is required')


class NotFoundError(GitFlowError, LookupError):

    """
    Exception raised when an expected branch, tag, reference or configuration key is absent.

    Attributes:
        kind (str): what was looked up, ex: branch, tag, config
        name (str): the missing name
    """
    def __init__(self, kind: str, name: str, message: str = None):
        self.kind = kind
        self.name = name
        super().__init__(message or f'Cannot locate {kind} \'{name}\'')


class ConflictError(GitFlowError):

    """
    Exception raised when creating a branch or a tag that already exists.

    Attributes:
        kind (str): branch or tag
        name (str): the existing name
    """
    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f'The {kind} \'{name}\' already exists')


class AmbiguousBranchError(GitFlowError):

    """
    Exception raised when several release branches exist and nothing selects one of them.

    Attributes:
        candidates (list): names of the release branches
    """
    def __init__(self, candidates: list):
        self.candidates = list(candidates)
        names = ', '.join(f'\'{name}\'' for name in self.candidates)
        super().__init__(f'Multiple release branches found ({names}), '
                         f'a release branch selection callback is required')


class MergeError(GitFlowError):

    """
    Exception raised when the repository refuses to merge, ex: conflicts.

    Attributes:
        target (str): the branch merged into
        source (str): the branch being merged
    """
    def __init__(self, target: str, source: str, reason: str):
        self.target = target
        self.source = source
        self.reason = reason
        super().__init__(f'Failed to merge \'{source}\' into \'{target}\': {reason}')


class DescriptionError(GitFlowError):

    """
    Exception for an invalid description file.

    Attributes:
        path (str): file path or url
    """
    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f'Invalid description \'{path}\': {message}')


class EventHandlerError(GitFlowError):

    """
    Exception raised for errors when executing an event handler.

    Attributes:
        handler (str): event handler name
        message (str): error message
    """
    def __init__(self, handler: str, message: str):
        self.handler = handler
        super().__init__(f'The event handler \'{handler}\' failed, error: {message}')
