import pytest

from gizmos.redis.cache import Cache
from gizmos.redis.commands import handle_request
from gizmos.redis.node import AggregateNode, PlainNode, VariantNode, deserialize


def _request(*parts):
    return AggregateNode([VariantNode(p) for p in parts]).serialize()


def _run(cache, *parts):
    return handle_request(_request(*parts), cache)


def _err(message):
    return PlainNode(message, ok=False).serialize()


def _list(*items):
    return AggregateNode([VariantNode(i) for i in items]).serialize()


@pytest.fixture
def cache():
    return Cache()


def test_ping_without_arguments(cache):
    assert _run(cache, "ping") == PlainNode("PONG").serialize()


def test_ping_is_case_insensitive(cache):
    assert _run(cache, "PiNg") == PlainNode("PONG").serialize()


def test_ping_echoes_single_argument(cache):
    assert _run(cache, "ping", "hello world") == VariantNode("hello world").serialize()


def test_ping_too_many_arguments(cache):
    assert _run(cache, "ping", "a", "b") == _err("Wrong number of arguments for 'ping' command")


def test_plain_ping_request(cache):
    assert handle_request("+PING\r\n", cache) == PlainNode("PONG").serialize()


def test_echo(cache):
    assert _run(cache, "echo", "hello world") == VariantNode("hello world").serialize()
    assert _run(cache, "echo") == _err("Wrong number of arguments for 'echo' command")


def test_set_then_get(cache):
    assert _run(cache, "set", "key", "value") == "+OK\r\n"
    assert _run(cache, "get", "key") == VariantNode("value").serialize()


def test_get_missing_is_null(cache):
    assert _run(cache, "get", "missing") == "$-1\r\n"


def test_get_wrong_arguments(cache):
    assert _run(cache, "get") == _err("Wrong number of arguments for 'get' command")


def test_set_wrong_arguments(cache):
    assert _run(cache, "set", "key") == _err("Wrong number of arguments for 'set' command")


def test_set_with_ex_sets_ttl_in_seconds(cache):
    assert _run(cache, "set", "key", "value", "EX", "100") == PlainNode("OK").serialize()
    reply = deserialize(_run(cache, "ttl", "key"))
    assert isinstance(reply, VariantNode)
    assert 0 <= reply.value <= 100


def test_set_with_pxat_in_the_past_expires(cache):
    _run(cache, "set", "key", "value", "pxat", "1")
    assert _run(cache, "get", "key") == VariantNode(None).serialize()


def test_set_with_bad_expiry(cache):
    assert _run(cache, "set", "key", "value", "ex", "soon") == _err("Invalid syntax")


def test_set_ignores_unknown_options(cache):
    assert _run(cache, "set", "key", "value", "keep", "5") == PlainNode("OK").serialize()
    assert _run(cache, "ttl", "key") == VariantNode(-1).serialize()


def test_ttl_missing_key(cache):
    assert _run(cache, "ttl", "missing") == VariantNode(-2).serialize()


def test_exists_counts_every_argument(cache):
    _run(cache, "set", "a", "1")
    assert _run(cache, "exists", "a", "a", "missing") == VariantNode(2).serialize()


def test_del_counts_removed_keys(cache):
    _run(cache, "set", "a", "1")
    _run(cache, "set", "b", "2")
    assert _run(cache, "del", "a", "b", "c") == VariantNode(2).serialize()
    assert _run(cache, "exists", "a", "b") == VariantNode(0).serialize()


def test_incr_and_decr(cache):
    assert _run(cache, "incr", "n") == VariantNode("1").serialize()
    assert _run(cache, "incr", "n") == VariantNode("2").serialize()
    assert _run(cache, "decr", "n") == VariantNode("1").serialize()
    assert _run(cache, "decr", "fresh") == VariantNode("-1").serialize()


def test_incr_on_text_fails(cache):
    _run(cache, "set", "word", "abc")
    assert _run(cache, "incr", "word") == _err("value is not an integer or out of range")


def test_incr_wrong_arguments(cache):
    assert _run(cache, "incr") == _err("Wrong number of arguments for 'incr' command")


def test_push_and_range_order(cache):
    assert _run(cache, "rpush", "l", "a", "b", "c") == VariantNode(3).serialize()
    assert _run(cache, "lpush", "l", "z") == VariantNode(1).serialize()
    assert _run(cache, "lrange", "l", "0", "-1") == _list("z", "a", "b", "c")
    assert _run(cache, "llen", "l") == VariantNode(4).serialize()


def test_lrange_clamps_indices(cache):
    _run(cache, "rpush", "l", "a", "b", "c", "d")
    assert _run(cache, "lrange", "l", "-2", "-1") == _list("c", "d")
    assert _run(cache, "lrange", "l", "2", "100") == _list("c", "d")
    assert _run(cache, "lrange", "l", "3", "1") == AggregateNode().serialize()


def test_lrange_missing_key_is_empty(cache):
    assert _run(cache, "lrange", "none", "0", "-1") == AggregateNode().serialize()


def test_lrange_bad_index(cache):
    assert _run(cache, "lrange", "l", "x", "1") == _err("Value is not an integer or out of range")


def test_lrange_wrong_arguments(cache):
    assert _run(cache, "lrange", "l") == _err("ERR wrong number of arguments for command")


def test_wrong_type_operations(cache):
    _run(cache, "set", "s", "text")
    wrong = _err("WRONGTYPE Operation against a key holding the wrong kind of value")
    assert _run(cache, "lpush", "s", "x") == wrong
    assert _run(cache, "lrange", "s", "0", "1") == wrong
    assert _run(cache, "llen", "s") == wrong


def test_llen_missing_key(cache):
    assert _run(cache, "llen", "none") == VariantNode(0).serialize()


def test_unknown_command(cache):
    assert _run(cache, "flushall") == _err("Not supported")


def test_malformed_request_is_not_supported(cache):
    assert handle_request("*2\r\n$3\r\nget", cache) == _err("Not supported")


def test_nested_array_argument_is_rejected(cache):
    request = "*2\r\n$6\r\nlrange\r\n*1\r\n$1\r\na\r\n"
    assert handle_request(request, cache) == _err("Node cannot contain aggregate nodes inside")