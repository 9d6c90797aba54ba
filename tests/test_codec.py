from __future__ import annotations

import pytest

from docsite.codec import DECODER_JS, decode_info, encode_info


def test_encode_info_emits_utf8_byte_values() -> None:
    assert encode_info({"a": 1}) == "123,34,97,34,58,49,125"


def test_encode_info_round_trips_non_ascii_and_empty_lists() -> None:
    info = [{"key": "submodule_1", "doc": [], "component": [{"name": "按钮", "info": {}, "children": []}]}]
    encoded = encode_info(info)
    assert set(encoded) <= set("0123456789,")
    assert decode_info(encoded) == info


def test_encode_info_of_empty_tree() -> None:
    assert decode_info(encode_info([])) == []


@pytest.mark.parametrize("encoded", ["", "not,bytes", "999,1", "123,34", None])
def test_decode_info_returns_empty_mapping_for_malformed_input(encoded) -> None:
    assert decode_info(encoded) == {}


def test_decoder_source_defines_decode_function() -> None:
    assert DECODER_JS.startswith("function decodeInfo(infoStr)")
    assert "return {};" in DECODER_JS
