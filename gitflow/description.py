import json
from collections import deque
from collections.abc import Mapping

import yaml

from ._utils import read_data
from .exception import DescriptionError

EVENTS = ('success', 'error')


def _recursive_update(left: Mapping, *others: Mapping):
    r = {}
    r.update(left)
    for item in others:
        for k, v in item.items():
            if isinstance(v, Mapping):
                r[k] = _recursive_update(r.get(k) or {}, v)
            else:
                r[k] = v
    return r


def _read_yaml(yaml_path, externals: dict = None):
    parsed = {}
    if yaml_path:
        try:
            parsed = yaml.safe_load(read_data(yaml_path)) or {}
        except (OSError, yaml.YAMLError) as e:
            raise DescriptionError(yaml_path, str(e)) from e
        if not isinstance(parsed, Mapping):
            raise DescriptionError(yaml_path, 'the document must be a mapping')
    if externals:
        for key, value in externals.items():
            _set_nested_attr(parsed, deque(key.split('.')), value)
    return parsed


def _set_nested_attr(tree, paths: deque, value: str):
    if paths:
        attr = paths.popleft()
        attr_value = tree.get(attr, {})
        tree[attr] = _set_nested_attr(attr_value, paths, value)
        return tree
    else:
        try:
            return json.loads(value)
        except json.decoder.JSONDecodeError:
            return value


class Description:
    """
    Settings of the command line tool, read from an optional yaml file (path or url).

    Sections: "executor" (where git runs), "repository" (working directory),
    "gitflow" (config written by init), "hotfix" (finish options) and "events"
    (handlers run on success or error).
    """

    def __init__(self, yaml_path=None, externals: dict = None):
        self._path = yaml_path or '<command line>'
        self._yaml = _read_yaml(yaml_path, externals)
        self._check()

    def executor(self) -> dict:
        return dict(self._yaml.get('executor') or {})

    def repository(self, default: str = None) -> str:
        return self._yaml.get('repository') or default

    def gitflow(self) -> dict:
        # "gitflow.prefix.hotfix" style keys are split by the -d overrides, flatten them back
        return {key: value for key, value in _flatten(self._yaml.get('gitflow') or {}, 'gitflow')}

    def hotfix(self, overrides: dict = None) -> dict:
        return _recursive_update(self._yaml.get('hotfix') or {}, overrides or {})

    def event_handlers(self, event_name: str) -> list:
        handlers = (self._yaml.get('events') or {}).get(f'_on_{event_name}') or []
        return handlers if isinstance(handlers, list) else [handlers]

    def _check(self):
        for section in ('executor', 'gitflow', 'hotfix', 'events'):
            value = self._yaml.get(section)
            if value is not None and not isinstance(value, Mapping):
                raise DescriptionError(self._path, f'"{section}" must be a mapping')
        for event_name in EVENTS:
            for handler in self.event_handlers(event_name):
                if not isinstance(handler, Mapping) or 'name' not in handler:
                    raise DescriptionError(self._path, f'Missing name for the event handler \'_on_{event_name}\'.')
                if not isinstance(handler.get('args', {}), Mapping):
                    raise DescriptionError(self._path, f'The args of event handler \'_on_{event_name}\' MUST be an object.')


def _flatten(value: Mapping, prefix: str):
    for k, v in value.items():
        key = k if k.startswith(f'{prefix}.') else f'{prefix}.{k}'
        if isinstance(v, Mapping):
            yield from _flatten(v, key)
        else:
            yield key, '' if v is None else str(v)
