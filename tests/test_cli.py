from pathlib import Path

import pytest

from conftest import commit_file, git, requires_git
from gitflow import cli
from gitflow.event import dingding
from gitflow.exception import NotFoundError

EVENTS = """
events:
  _on_success:
    name: dingding
    args:
      access_token: token
      messages:
        success: {{msgtype: text, text: {{content: "{{command}} {{version}} done"}}}}
  _on_error:
    name: dingding
    args:
      access_token: token
      messages:
        error: {{msgtype: text, text: {{content: "{{error}}"}}}}
repository: {directory}
"""


def _run(*argv):
    cli._execute(**vars(cli.create_parser().parse_args(list(argv))))


@pytest.fixture
def notifications(monkeypatch):
    sent = []

    class Response:
        status_code = 200

        @staticmethod
        def json():
            return {'errcode': 0}

    def post(url, **kwargs):
        sent.append(kwargs['json']['text']['content'])
        return Response()

    monkeypatch.setattr(dingding.requests, 'post', post)
    return sent


def test_parse_finish_arguments():
    args = cli.create_parser().parse_args(['-C', 'repo', '-d', 'executor.host=h', '-d', 'hotfix.message=m',
                                           'hotfix', 'finish', '1.0.1', '-k', '--release-branch', 'release/2'])

    assert args.directory == 'repo'
    assert args.d == {'executor.host': 'h', 'hotfix.message': 'm'}
    assert args.command == 'hotfix'
    assert args.action == 'finish'
    assert args.version == '1.0.1'
    assert args.keep_branch is True
    assert args.message is None
    assert args.release_branch == 'release/2'


def test_parse_invalid_override():
    with pytest.raises(SystemExit):
        cli.create_parser().parse_args(['-d', 'no-equal-sign', 'init'])


def test_finish_options_select_release_branch():
    options = cli._finish_options({'keep_branch': True, 'release_branch': 'release/2'})

    assert options.keep_branch is True
    assert options.select_release_branch_callback([]) == 'release/2'


@requires_git
def test_hotfix_workflow(git_repo):
    directory = Path(git_repo.directory)

    _run('-C', str(directory), '-d', 'gitflow.prefix.versiontag=v', 'init')
    _run('-C', str(directory), 'hotfix', 'start', '1.0.1')
    commit_file(directory, 'fix.txt', 'fixed', 'the fix')
    _run('-C', str(directory), 'hotfix', 'finish', '1.0.1', '-m', 'Hotfix 1.0.1 released')

    assert git(directory, 'config', 'gitflow.prefix.versiontag') == 'v'
    assert git(directory, 'rev-parse', 'refs/tags/v1.0.1^{commit}') == git(directory, 'rev-parse', 'master')
    assert git(directory, 'tag', '-l', '--format=%(contents:subject)', 'v1.0.1') == 'Hotfix 1.0.1 released'
    assert not git_repo.branch_exists('hotfix/1.0.1')


@requires_git
def test_event_handlers(git_repo, tmp_path, notifications):
    description = tmp_path / 'gitflow.yml'
    description.write_text(EVENTS.format(directory=git_repo.directory))

    _run('-f', str(description), 'init')
    _run('-f', str(description), 'hotfix', 'start', '1.0.1')
    with pytest.raises(NotFoundError):
        _run('-f', str(description), 'hotfix', 'finish', '1.0.2')

    assert notifications == ['init  done', 'hotfix 1.0.1 done', "Cannot locate local branch 'hotfix/1.0.2'"]


def test_main_reports_errors(monkeypatch, capsys, tmp_path):
    monkeypatch.setattr('sys.argv', ['gitflow', '-f', str(tmp_path / 'missing.yml'), 'init'])

    with pytest.raises(Exception):
        cli.main()
    assert '[ERROR] failed...' in capsys.readouterr().err
