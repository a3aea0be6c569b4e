import aiohttp
from aiohttp import payload


OCTET_STREAM = 'application/octet-stream'


class FormDataWriter(aiohttp.MultipartWriter):
    def __init__(self):
        super().__init__(subtype='form-data')


def stream_payload(stream, name=''):
    """
    Wrap a byte source into a form-data payload that aiohttp reads
    while the request is being sent (nothing is buffered here).

    The source can be bytes, a binary file object (BytesIO, opened file)
    or an async iterable of bytes chunks.
    """

    try:
        part = payload.get_payload(stream, content_type=OCTET_STREAM)
    except payload.LookupError:
        raise TypeError(
            f'Unsupported data source type: {type(stream).__name__}')

    part.set_content_disposition('form-data',
                                 name='file', filename=name)
    return part


def multiform_stream(stream, name=''):
    with FormDataWriter() as mpwriter:
        mpwriter.append_payload(stream_payload(stream, name=name))
        return mpwriter
