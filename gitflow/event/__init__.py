from . import dingding

handlers = {
    'dingding': dingding,
}
