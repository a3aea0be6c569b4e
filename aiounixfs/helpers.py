import json

from typing import Union

from multiformats_cid import make_cid
from multiformats_cid import CIDv0
from multiformats_cid import CIDv1


try:
    import orjson  # type: ignore
except ImportError:
    have_orjson = False
else:
    have_orjson = True


ARG_PARAM = 'arg'


def boolarg(arg):
    return str(arg).lower()


def decode_json(data: bytes):
    if not isinstance(data, bytes):  # pragma: no cover
        raise TypeError('decode_json: invalid value type')

    if have_orjson:
        return orjson.loads(data.decode())
    else:
        return json.loads(data.decode())


def size_value(value) -> int:
    """
    Sizes are sent as integers by some endpoints and as strings by others
    ("Size": "42" in add results). Missing sizes count as 0.
    """

    if value is None or value == '':
        return 0

    size = int(value)
    if size < 0:
        raise ValueError(f'Invalid size: {value}')

    return size


def cid_decode(cid: str) -> Union[CIDv0, CIDv1]:
    """
    Decode a CID string returned by the daemon

    :param str cid: CID in its canonical string form
    :raises ValueError: the string is not a valid CID
    """

    decoded = make_cid(cid)
    if not decoded:  # pragma: no cover
        raise ValueError(f'Invalid CID: {cid}')

    return decoded
