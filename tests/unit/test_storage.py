"""
Storage collaborators: key DSL, SQLite KV, bridge key namespace and the
bridge pool (opaque ABI blobs keyed by keccak).
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ethbridge.errors import NotFound, StorageError
from ethbridge.storage import bridge_pool, keys
from ethbridge.storage.kv import KV, Prefix, be_u64, get_or_raise, put_many
from ethbridge.storage.sqlite import _prefix_hi, open_sqlite_kv
from ethbridge.types.eth_abi import encode
from ethbridge.types.eth_bridge_pool import GasFee, PendingTransfer, TransferToEthereum
from ethbridge.types.ethereum_events import EthAddress


def _pending(amount: int) -> PendingTransfer:
    return PendingTransfer(
        transfer=TransferToEthereum(
            asset=EthAddress(b"\x11" * 20),
            recipient=EthAddress(b"\x22" * 20),
            sender="atest1sender",
            amount=amount,
        ),
        gas_fee=GasFee(amount=1, payer="atest1payer"),
    )


# -- Key DSL -----------------------------------------------------------------------

def test_prefix_keys_are_length_prefixed() -> None:
    p = Prefix("ns")
    assert p.raw == b"ns:"
    assert p.key("ab", b"\x01") == b"ns:" + b"\x02ab" + b"\x01\x01"
    assert p.key(0) == b"ns:\x01\x00"
    assert Prefix(b"ns:").raw == b"ns:"


def test_prefix_parts_do_not_collide() -> None:
    p = Prefix("ns")
    assert p.key("a", "bc") != p.key("ab", "c")


def test_prefix_rejects_bad_parts() -> None:
    with pytest.raises(ValueError):
        Prefix("")
    with pytest.raises(ValueError):
        Prefix("ns").key(-1)
    with pytest.raises(TypeError):
        Prefix("ns").key(1.5)  # type: ignore[arg-type]


def test_be_u64() -> None:
    assert be_u64(1) == b"\x00" * 7 + b"\x01"
    with pytest.raises(ValueError):
        be_u64(1 << 64)


def test_prefix_hi() -> None:
    assert _prefix_hi(b"ab\x01") == b"ab\x02"
    assert _prefix_hi(b"a\xff") == b"b"
    assert _prefix_hi(b"\xff\xff") is None
    assert _prefix_hi(b"") is None


# -- SQLite KV ---------------------------------------------------------------------

def test_sqlite_kv_basic_ops(kv) -> None:
    assert isinstance(kv, KV)
    assert kv.get(b"k") is None
    kv.put(b"k", b"v1")
    kv.put(b"k", b"v2")
    assert kv.get(b"k") == b"v2"
    assert kv.has(b"k")
    kv.delete(b"k")
    kv.delete(b"k")
    assert not kv.has(b"k")


def test_iter_prefix_is_ordered_and_bounded(kv) -> None:
    put_many(kv, [(b"p:\x02", b"2"), (b"p:\x01", b"1"), (b"q:\x00", b"x"), (b"p;", b"y")])
    assert list(kv.iter_prefix(b"p:")) == [(b"p:\x01", b"1"), (b"p:\x02", b"2")]


def test_iter_prefix_with_unbounded_prefix(kv) -> None:
    kv.put(b"\xff\xff\x01", b"a")
    kv.put(b"\xff\xfe", b"b")
    assert list(kv.iter_prefix(b"\xff\xff")) == [(b"\xff\xff\x01", b"a")]


def test_batch_commits_on_success(kv) -> None:
    kv.put(b"gone", b"x")
    with kv.batch() as b:
        b.put(b"a", b"1")
        b.delete(b"gone")
    assert kv.get(b"a") == b"1"
    assert kv.get(b"gone") is None


def test_batch_rolls_back_on_error(kv) -> None:
    with pytest.raises(RuntimeError):
        with kv.batch() as b:
            b.put(b"a", b"1")
            raise RuntimeError("boom")
    assert kv.get(b"a") is None


def test_batch_must_be_open(kv) -> None:
    with pytest.raises(StorageError):
        kv.batch().put(b"a", b"1")


def test_get_or_raise(kv) -> None:
    kv.put(b"a", b"1")
    assert get_or_raise(kv, b"a", KeyError("a")) == b"1"
    with pytest.raises(KeyError):
        get_or_raise(kv, b"b", KeyError("b"))


def test_file_backed_store_persists(tmp_path: Path) -> None:
    path = tmp_path / "db" / "kv.sqlite"
    store = open_sqlite_kv(path)
    store.put(b"a", b"1")
    store.close()
    store = open_sqlite_kv(path, create=False)
    try:
        assert store.get(b"a") == b"1"
    finally:
        store.close()


def test_missing_store_with_create_false(tmp_path: Path) -> None:
    with pytest.raises(StorageError):
        open_sqlite_kv(tmp_path / "missing.sqlite", create=False)


# -- Bridge key namespace --------------------------------------------------------------

def test_bridge_keys_live_under_the_bridge_prefix() -> None:
    assert keys.prefix() == b"ethbridge:"
    assert keys.is_eth_bridge_key("nam", keys.prefix())
    assert keys.is_eth_bridge_key("nam", keys.BRIDGE.key("arbitrary key segment"))


def test_escrow_key_belongs_to_the_bridge() -> None:
    escrow = keys.escrow_key("nam")
    assert not escrow.startswith(keys.prefix())
    assert keys.is_eth_bridge_key("nam", escrow)
    assert not keys.is_eth_bridge_key("other", escrow)
    with pytest.raises(ValueError):
        keys.escrow_key("")


def test_foreign_keys_are_not_bridge_keys() -> None:
    foreign = Prefix("atest1established").key("arbitrary key segment")
    assert not keys.is_eth_bridge_key("nam", foreign)
    assert not keys.is_eth_bridge_key("nam", keys.active_key())


def test_parameter_keys_are_distinct() -> None:
    params = [
        keys.eth_start_height_key(),
        keys.active_key(),
        keys.min_confirmations_key(),
        keys.native_erc20_key(),
        keys.bridge_contract_key(),
        keys.governance_contract_key(),
    ]
    assert len(set(params)) == len(params)
    assert all(k.startswith(keys.PARAMS.raw) for k in params)


# -- Bridge pool ------------------------------------------------------------------------

def test_pending_key_is_keccak_of_encoding() -> None:
    t = _pending(10)
    key = bridge_pool.pending_key(t)
    assert bridge_pool.is_bridge_pool_key(key)
    assert key.endswith(t.keccak256().to_hex().encode("ascii"))
    assert not keys.is_eth_bridge_key("nam", key)


def test_put_get_remove(kv) -> None:
    t = _pending(10)
    key = bridge_pool.put_pending(kv, t)
    assert key == bridge_pool.pending_key(t)
    assert bridge_pool.get_pending_encoded(kv, t) == encode(t).into_inner()
    bridge_pool.remove_pending(kv, t)
    assert bridge_pool.get_pending_encoded(kv, t) is None


def test_identical_transfers_share_one_entry(kv) -> None:
    bridge_pool.put_pending(kv, _pending(10))
    bridge_pool.put_pending(kv, _pending(10))
    assert len(list(bridge_pool.iter_pending(kv))) == 1


def test_iter_pending_is_key_ordered_and_scoped(kv) -> None:
    transfers = [_pending(n) for n in (1, 2, 3)]
    for t in transfers:
        bridge_pool.put_pending(kv, t)
    kv.put(keys.active_key(), b"\x01")
    entries = list(bridge_pool.iter_pending(kv))
    assert [k for k, _ in entries] == sorted(bridge_pool.pending_key(t) for t in transfers)
    assert {v for _, v in entries} == {encode(t).into_inner() for t in transfers}


def test_remove_missing_entry(kv) -> None:
    bridge_pool.remove_pending(kv, _pending(5))
    with pytest.raises(NotFound):
        bridge_pool.remove_pending(kv, _pending(5), missing_ok=False)
