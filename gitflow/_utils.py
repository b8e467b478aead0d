import inspect
import re
import urllib.request as request


def read_data(path):
    if re.match(r'^https?://.+$', path):
        with request.urlopen(path) as resp:
            return resp.read().decode('utf-8')
    else:
        with open(path, 'rb') as f:
            return f.read()


async def maybe_await(value):
    """
    Resolve the result of a callback which may be either a plain value or an awaitable.
    """
    if inspect.isawaitable(value):
        return await value
    return value


def optional(value):
    return Optional(value)


class Optional:

    def __init__(self, value):
        self.value = value

    def or_get(self, value):
        return self.value if self.value else value

    def format(self, f: str, d=""):
        return f.format(self.value) if self.value else d
