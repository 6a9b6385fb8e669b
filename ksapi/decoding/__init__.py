"""
Response decoding for ksapi.
"""

from .pipeline import (
    decode_error_envelope,
    decode_graph_envelope,
    decode_model,
    decode_models,
    decode_optional_model,
    parse_json,
)
from .result import Decoded, Failure, Success, decode, decode_field, decode_list

__all__ = [
    "decode_error_envelope",
    "decode_graph_envelope",
    "decode_model",
    "decode_models",
    "decode_optional_model",
    "parse_json",
    "Decoded",
    "Failure",
    "Success",
    "decode",
    "decode_field",
    "decode_list",
]
