import requests

from ..exception import EventHandlerError

ROBOT_URL = 'https://oapi.dingtalk.com/robot/send'


class _Variables(dict):

    def __missing__(self, key):
        return ''


def _render(value, variables: dict):
    if isinstance(value, str):
        return value.format_map(variables)
    if isinstance(value, list):
        return [_render(item, variables) for item in value]
    if isinstance(value, dict):
        return {k: _render(v, variables) for k, v in value.items()}
    return value


def run(selector: str, variables: dict, access_token: str, messages: dict):
    """
    Post the message selected by the event name to a dingding robot.

    Args:
        selector (str): event name, ex: success, error
        variables (dict): values substituted into the "{name}" placeholders of the message
        access_token (str): robot access token
        messages (dict): message body per event name, "*" for any event

    Returns:
        True if a message was sent
    """
    body = messages.get(selector, messages.get('*', {}))
    if body:
        r = requests.post(ROBOT_URL, params={'access_token': access_token}, json=_render(body, _Variables(variables)))
        if r.status_code == 200:
            if r.json().get('errcode') != 0:
                raise EventHandlerError('dingding', r.json().get('errmsg'))
        else:
            raise EventHandlerError('dingding', str(r))
    return bool(body)
