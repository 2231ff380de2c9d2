"""DICT protocol adapter (RFC 2229 client engine).

Why a package:
- Groups the wire codec (atoms), status reading, response plans and the
  connection itself; only the connection is meant for callers.
"""

from adapters.dict_protocol.atoms import build_command, format_atom, quote_atom, split_atoms
from adapters.dict_protocol.connection import DictionaryConnection, connect

__all__ = [
    "DictionaryConnection",
    "build_command",
    "connect",
    "format_atom",
    "quote_atom",
    "split_atoms",
]
