"""Command handlers that turn a RESP request into a RESP reply."""

from __future__ import annotations

from functools import partial
from typing import Callable, Optional

from gizmos.redis.cache import Cache
from gizmos.redis.node import (
    AggregateNode,
    NodeError,
    PlainNode,
    RedisNode,
    VariantNode,
    deserialize,
)

_DIGITS = frozenset("0123456789")
_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1

_WRONG_TYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"
_WRONG_ARGS = "ERR wrong number of arguments for command"

_EXPIRY_SETTERS: dict[str, Callable[[Cache, str, int], None]] = {
    "ex": Cache.expire_in_seconds,
    "px": Cache.expire_in_millis,
    "exat": Cache.expire_at_seconds,
    "pxat": Cache.expire_at_millis,
}

Handler = Callable[[AggregateNode, Cache], str]


def _error(message: str) -> str:
    return PlainNode(message, ok=False).serialize()


def _text(node: RedisNode) -> str:
    if isinstance(node, PlainNode):
        return node.message
    if isinstance(node, VariantNode):
        return node.text()
    raise NodeError("Node cannot contain aggregate nodes inside")


def _is_unsigned(text: str) -> bool:
    return bool(text) and all(ch in _DIGITS for ch in text)


def _parse_signed(text: str) -> Optional[int]:
    """Parse an optionally negative decimal that fits a signed 64-bit integer."""
    if not text or not (text[0] == "-" or text[0] in _DIGITS):
        return None
    if not all(ch in _DIGITS for ch in text[1:]):
        return None
    try:
        number = int(text)
    except ValueError:
        return None
    return number if _LONG_MIN <= number <= _LONG_MAX else None


def _live(cache: Cache, key: str) -> bool:
    return cache.exists(key) and not cache.expired(key)


def _ping(args: AggregateNode, cache: Cache) -> str:
    if len(args) == 0:
        return PlainNode("PONG").serialize()
    if len(args) == 1:
        return args.front().serialize()
    return _error("Wrong number of arguments for 'ping' command")


def _echo(args: AggregateNode, cache: Cache) -> str:
    if len(args) == 1:
        return args.front().serialize()
    return _error("Wrong number of arguments for 'echo' command")


def _set(args: AggregateNode, cache: Cache) -> str:
    if len(args) < 2:
        return _error("Wrong number of arguments for 'set' command")
    texts = [_text(node) for node in args]
    key, value, options = texts[0], texts[1], texts[2:]
    cache.set(key, VariantNode(value))

    for code, amount in zip(options, options[1:]):
        setter = _EXPIRY_SETTERS.get(code.lower())
        if setter is None:
            continue
        if not _is_unsigned(amount):
            return _error("Invalid syntax")
        setter(cache, key, int(amount))
        break

    return PlainNode("OK").serialize()


def _get(args: AggregateNode, cache: Cache) -> str:
    if len(args) != 1:
        return _error("Wrong number of arguments for 'get' command")
    return cache.get(_text(args[0])).serialize()


def _exists(args: AggregateNode, cache: Cache) -> str:
    count = sum(1 for key in args.strings() if cache.exists(key))
    return VariantNode(count).serialize()


def _delete(args: AggregateNode, cache: Cache) -> str:
    count = 0
    for key in args.strings():
        if cache.exists(key):
            count += not cache.expired(key)
            cache.erase(key)
    return VariantNode(count).serialize()


def _add(args: AggregateNode, cache: Cache, by: int) -> str:
    if len(args) != 1:
        return _error("Wrong number of arguments for 'incr' command")
    key = _text(args[0])
    if not _live(cache, key):
        cache.set(key, VariantNode(str(by)))
        return cache.get(key).serialize()

    current = cache.get(key)
    number = None if isinstance(current, AggregateNode) else _parse_signed(_text(current))
    if number is None:
        return _error("value is not an integer or out of range")
    cache.set(key, VariantNode(str(number + by)))
    return cache.get(key).serialize()


def _ttl(args: AggregateNode, cache: Cache) -> str:
    if len(args) != 1:
        return _error("Wrong number of arguments for 'ttl' command")
    millis = cache.ttl(_text(args[0]))
    return VariantNode(millis // 1000 if millis > 0 else millis).serialize()


def _lrange(args: AggregateNode, cache: Cache) -> str:
    texts = args.strings()
    if len(texts) != 3:
        return _error(_WRONG_ARGS)
    key = texts[0]
    left, right = _parse_signed(texts[1]), _parse_signed(texts[2])
    if left is None or right is None:
        return _error("Value is not an integer or out of range")
    if not _live(cache, key):
        return AggregateNode().serialize()
    stored = cache.get(key)
    if not isinstance(stored, AggregateNode):
        return _error(_WRONG_TYPE)

    size = len(stored)
    if left < 0:
        left += size
    if right < 0:
        right += size
    left, right = max(left, 0), min(right, size - 1)
    return AggregateNode(stored[i] for i in range(left, right + 1)).serialize()


def _push(args: AggregateNode, cache: Cache, at_back: bool) -> str:
    texts = args.strings()
    if len(texts) < 2:
        return _error(_WRONG_ARGS)
    key, items = texts[0], texts[1:]

    if _live(cache, key):
        target = cache.get(key)
        if not isinstance(target, AggregateNode):
            return _error(_WRONG_TYPE)
    else:
        cache.erase(key)
        target = AggregateNode()
        cache.set(key, target)

    push = target.push_back if at_back else target.push_front
    for item in items:
        push(VariantNode(item))
    return VariantNode(len(items)).serialize()


def _llen(args: AggregateNode, cache: Cache) -> str:
    if len(args) != 1:
        return _error(_WRONG_ARGS)
    key = _text(args[0])
    if not _live(cache, key):
        return VariantNode(0).serialize()
    stored = cache.get(key)
    if not isinstance(stored, AggregateNode):
        return _error(_WRONG_TYPE)
    return VariantNode(len(stored)).serialize()


_HANDLERS: dict[str, Handler] = {
    "ping": _ping,
    "echo": _echo,
    "set": _set,
    "get": _get,
    "exists": _exists,
    "del": _delete,
    "incr": partial(_add, by=1),
    "decr": partial(_add, by=-1),
    "ttl": _ttl,
    "lrange": _lrange,
    "lpush": partial(_push, at_back=False),
    "rpush": partial(_push, at_back=True),
    "llen": _llen,
}


def handle_request(request: str, cache: Cache) -> str:
    """Run one serialized request against the cache and return the serialized reply."""
    try:
        node = deserialize(request)
        if isinstance(node, AggregateNode):
            command = _text(node.pop_front()) if len(node) else ""
            args = node
        else:
            command = _text(node)
            args = AggregateNode()

        handler = _HANDLERS.get(command.lower())
        if handler is None:
            return _error("Not supported")
        return handler(args, cache)
    except NodeError as exc:
        return _error(str(exc))