from __future__ import annotations

import pytest

from etcdtxn.services.etcdctl.encoder import encode, render_token
from etcdtxn.services.etcdctl.nodes import (
    Compare,
    CompareFunction,
    CompareOp,
    Get,
    Put,
    Target,
    Txn,
    as_seq,
    gt,
    lt,
)


def test_cas_txn_renders_four_sections() -> None:
    txn = Txn(
        Compare(CompareOp.EQ, "k", Target(CompareFunction.VALUE, 1)),
        Put("k", 2),
        Put("k", 3),
    )
    text = encode(txn)

    assert text == 'val("k") = "1"\n\nput k "2"\n\nput k "3"\n\n'
    assert text.split("\n") == ['val("k") = "1"', "", 'put k "2"', "", 'put k "3"', "", ""]


def test_encoding_is_deterministic() -> None:
    txn = Txn([lt("a", CompareFunction.MOD_REVISION, 5)], [Get("a"), Put("a", "x")], Get("b"))
    assert encode(txn) == encode(txn)


@pytest.mark.parametrize(
    "txn, nodes",
    [
        (Txn(), 0),
        (Txn((), Get("k")), 1),
        (Txn(gt("k", CompareFunction.VERSION, 0), (), ()), 1),
        (Txn([], [], [Put("k", 1), Put("j", 2)]), 2),
    ],
)
def test_every_txn_has_four_sections(txn: Txn, nodes: int) -> None:
    text = encode(txn)
    # one line per node, three section terminators, one trailing empty section
    assert len(text.split("\n")) == nodes + 4
    assert text.endswith("\n")


def test_empty_txn_is_three_blank_lines() -> None:
    assert encode(Txn()) == "\n\n\n"


def test_bare_node_and_singleton_sequence_encode_identically() -> None:
    bare = Txn(lt("k", CompareFunction.MOD_REVISION, 3), Get("k"), Put("k", 1))
    listed = Txn([lt("k", CompareFunction.MOD_REVISION, 3)], [Get("k")], [Put("k", 1)])
    assert encode(bare) == encode(listed)


def test_compare_puts_function_before_key() -> None:
    assert encode(lt("k", CompareFunction.MOD_REVISION, 5)) == 'mod("k") < "5"'
    assert encode(gt("k", CompareFunction.VERSION, 2)) == 'ver("k") > "2"'


def test_value_compare_uses_stored_literal_form() -> None:
    assert encode(Compare(CompareOp.EQ, "k", Target(CompareFunction.VALUE, "v"))) == 'val("k") = "\\"v\\""'


def test_put_and_get() -> None:
    assert encode(Get("k")) == "get k"
    assert encode(Put(4, 7)) == 'put 4 "7"'
    assert encode(Put("k", "hi")) == 'put k "\\"hi\\""'


def test_tokens() -> None:
    assert render_token(12) == '"12"'
    assert render_token("plain") == '"plain"'
    assert render_token('say "hi"') == '"say \\"hi\\""'
    with pytest.raises(TypeError):
        render_token(True)
    with pytest.raises(TypeError):
        render_token(1.5)  # type: ignore[arg-type]


def test_as_seq() -> None:
    assert as_seq(None) == ()
    assert as_seq(Get("k")) == (Get("k"),)
    assert as_seq([Get("k"), Get("j")]) == (Get("k"), Get("j"))


def test_unknown_node_is_rejected() -> None:
    with pytest.raises(TypeError):
        encode(("put", "k", 1))  # type: ignore[arg-type]


def test_misplaced_nodes_are_rejected() -> None:
    with pytest.raises(ValueError):
        encode(Txn(Put("k", 1)))
    with pytest.raises(ValueError):
        encode(Txn((), Txn()))
    with pytest.raises(ValueError):
        encode(Txn((), (), lt("k", CompareFunction.VERSION, 1)))
