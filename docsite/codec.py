"""Encoding of the aggregated module info for embedding in generated source.

The JSON text is UTF-8 encoded and written as comma-separated byte values, so
the result contains only digits and commas and can sit inside any string
literal without escaping. ``DECODER_JS`` is the browser-side counterpart that
the generated entry module carries.
"""

from __future__ import annotations

import json
from typing import Any

from .logging import get_logger

logger = get_logger("codec")

DELIMITER = ","

DECODER_JS = """function decodeInfo(infoStr) {
  try {
    const decoder = new TextDecoder();
    const jsonStr = decoder.decode(new Uint8Array(infoStr.split(',')));
    return JSON.parse(jsonStr);
  } catch (e) {}

  return {};
}"""


def encode_info(info: Any) -> str:
    payload = json.dumps(info, ensure_ascii=False, separators=(",", ":"))
    return DELIMITER.join(str(byte) for byte in payload.encode("utf-8"))


def decode_info(encoded: str) -> Any:
    """Inverse of :func:`encode_info`; any malformed input yields ``{}``."""
    try:
        data = bytes(int(part) for part in encoded.split(DELIMITER))
        return json.loads(data.decode("utf-8"))
    except (AttributeError, TypeError, ValueError) as exc:
        logger.debug("Discarding undecodable module info: %s", exc)
        return {}


__all__ = ["DECODER_JS", "DELIMITER", "decode_info", "encode_info"]
