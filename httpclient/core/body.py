# httpclient/core/body.py
"""
Encodage du body des requêtes et décodage des réponses JSON dans une cible fournie par l'appelant.

Le dispatch se fait sur le type (functools.singledispatch) :
 - encode_body : bytes / bytearray / memoryview passent tels quels, un stream (io.IOBase) aussi,
   un modèle pydantic est sérialisé via model_dump_json, tout le reste part en JSON.
 - decode_into : dict mis à jour, list remplacée, modèle pydantic mis à jour champ par champ.
"""
import io
import json
from functools import singledispatch
from typing import Any, Union

from pydantic import BaseModel

EncodedBody = Union[bytes, io.IOBase]


# ---------------- Encodage ----------------

@singledispatch
def encode_body(value: Any) -> EncodedBody:
    """Branche par défaut : sérialisation JSON compacte (NaN/Infinity refusés)."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")


@encode_body.register(bytes)
def _(value: bytes) -> EncodedBody:
    return value


@encode_body.register(bytearray)
@encode_body.register(memoryview)
def _(value) -> EncodedBody:
    return bytes(value)


@encode_body.register(io.IOBase)
def _(value: io.IOBase) -> EncodedBody:
    # io.BytesIO (source bufferisée) comme fichier ouvert : transmis sans être lu
    return value


@encode_body.register(BaseModel)
def _(value: BaseModel) -> EncodedBody:
    return value.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


def is_stream(body: EncodedBody) -> bool:
    return isinstance(body, io.IOBase)


# ---------------- Décodage ----------------

def decode_into(target: Any, data: bytes) -> None:
    """Décode `data` (JSON) et écrit le résultat dans `target`. Lève ValueError/TypeError en cas d'échec."""
    value = json.loads(data)
    if value is not None:
        _assign(target, value)


def decode_stream_into(target: Any, data: bytes) -> None:
    """
    Comme decode_into, mais ne lit que la première valeur JSON du body : ce qui suit est ignoré.
    Un `null` laisse la cible intacte.
    """
    text = data.decode(json.detect_encoding(data), "surrogatepass").lstrip()
    value, _ = json.JSONDecoder().raw_decode(text)
    if value is not None:
        _assign(target, value)


@singledispatch
def _assign(target: Any, value: Any) -> None:
    raise TypeError(f"unsupported decode target: {type(target).__name__}")


@_assign.register(dict)
def _(target: dict, value: Any) -> None:
    if not isinstance(value, dict):
        raise TypeError(f"cannot decode JSON {type(value).__name__} into dict")
    target.update(value)


@_assign.register(list)
def _(target: list, value: Any) -> None:
    if not isinstance(value, list):
        raise TypeError(f"cannot decode JSON {type(value).__name__} into list")
    target[:] = value


@_assign.register(BaseModel)
def _(target: BaseModel, value: Any) -> None:
    # ValidationError hérite de ValueError
    validated = type(target).model_validate(value)
    for name in type(target).model_fields:
        setattr(target, name, getattr(validated, name))
