import argparse
import asyncio
import re
import sys

from . import event as events
from .common.executor import ProxyExecutor
from .common.repository import Repository
from .description import Description
from .flow import Flow
from .hotfix import HotfixOptions
from .logger import logger

OVERRIDE_KEY_REGEX = r'[\w.-]+'


class OverrideAction(argparse.Action):

    def __call__(self, arg_parser, namespace, values, option_string=None):
        v = dict(getattr(namespace, self.dest) or {})
        for pair in [values] if isinstance(values, str) else values:
            m = re.match(f'^({OVERRIDE_KEY_REGEX})=(.*)$', pair)
            if not m:
                arg_parser.error(f'invalid override "{pair}", the format should be "{OVERRIDE_KEY_REGEX}=(.*)"')
            v[m.group(1)] = m.group(2)
        setattr(namespace, self.dest, v)


def create_parser():
    parser = argparse.ArgumentParser(prog='gitflow', description='git-flow hotfix tool',
                                     formatter_class=argparse.RawTextHelpFormatter)
    parser.add_argument('-C', dest='directory', default=None, help='repository directory, the current one by default')
    parser.add_argument('-f', '--file', default=None, help='file path/url of the yaml description')
    parser.add_argument('-d', action=OverrideAction, default=dict(), metavar='path=value',
                        help='repeatable, for example: -d executor.host=build.example.com overwrites the description.')
    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('init', help='write the gitflow config and create the develop branch')

    hotfix = commands.add_parser('hotfix', help='start or finish a hotfix')
    actions = hotfix.add_subparsers(dest='action', required=True)
    start = actions.add_parser('start', help='start a hotfix branch from master')
    start.add_argument('version', help='hotfix version, ex: 1.0.1')
    finish = actions.add_parser('finish', help='merge the hotfix branch, tag master and delete the branch')
    finish.add_argument('version', help='hotfix version, ex: 1.0.1')
    finish.add_argument('-k', '--keep-branch', action='store_true', default=None, help='keep the hotfix branch')
    finish.add_argument('-m', '--message', default=None, help='tag message')
    finish.add_argument('--release-branch', default=None,
                        help='release branch to merge into when more than one exists')
    return parser


def _finish_options(settings: dict) -> HotfixOptions:
    settings = dict(settings)
    release_branch = settings.pop('release_branch', None)
    options = HotfixOptions.of(settings)
    if release_branch:
        options.select_release_branch_callback = lambda _: release_branch
    return options


async def _run_command(flow: Flow, description: Description, args: dict):
    if args['command'] == 'init':
        await Flow.init(flow.repo, description.gitflow(), flow.backend)
    elif args['action'] == 'start':
        branch = await flow.start_hotfix(args['version'])
        logger.info(f'Switched to the hotfix branch \'{branch.name}\'.')
    else:
        overrides = {key: args.get(key) for key in ('keep_branch', 'message', 'release_branch')
                     if args.get(key) is not None}
        commit = await flow.finish_hotfix(args['version'], _finish_options(description.hotfix(overrides)))
        logger.info(f'Finished the hotfix \'{args["version"]}\'' + (f', merged as {commit}.' if commit else '.'))


def _exec_handler(description: Description, event_name: str, variables: dict):
    for handler in description.event_handlers(event_name):
        event_handler = events.handlers.get(handler['name'])
        if event_handler is None:
            raise NotImplementedError(f'Event handler \'{handler["name"]}\' not implemented yet.')
        if event_handler.run(event_name, variables, **handler.get('args', {})):
            break


def _execute(**kwargs):
    args = kwargs.copy()
    description = Description(args.get('file'), args.get('d'))
    variables = {'command': args['command'], 'version': args.get('version', '')}
    with ProxyExecutor(**description.executor()) as executor:
        repository = Repository(executor, args.get('directory') or description.repository('.'))
        flow = Flow(repository)
        try:
            asyncio.run(_run_command(flow, description, args))
        except Exception as e:
            _exec_handler(description, 'error', {**variables, 'error': str(e)})
            raise
        _exec_handler(description, 'success', variables)


def main():
    parsed_args = create_parser().parse_args()
    try:
        _execute(**(vars(parsed_args)))
    except Exception as e:
        sys.stderr.write(f'[ERROR] failed... type: {type(e)}\n        message: {e}\n')
        raise
