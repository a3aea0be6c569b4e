import json
import logging
import os.path

from typing import AsyncIterable, Union

from aiounixfs import multi
from aiounixfs.apis import SubAPI
from aiounixfs.apis import TRANSPORT_ERRORS
from aiounixfs.helpers import *  # noqa
from aiounixfs.exceptions import *  # noqa
from aiounixfs.node import FileSystemLink
from aiounixfs.node import FileSystemNode
from aiounixfs.options import AddOptions
from aiounixfs.options import TransferProgress
from aiounixfs.options import add_options


log = logging.getLogger(__name__)

# Only progress records carry this key, the daemon does not tag records
PROGRESS_KEY = 'Bytes'


def is_progress_record(record: dict) -> bool:
    return PROGRESS_KEY in record


def record_size(record: dict, key: str) -> int:
    try:
        return size_value(record.get(key))
    except (TypeError, ValueError) as err:
        raise ProtocolError(f'Invalid {key} in record {record!r}') from err


class UnixFSAPI(SubAPI):
    """
    UnixFS API: adding content, listing and reading files
    """

    def node(self, cid: str, name: str = '', **kwargs) -> FileSystemNode:
        """
        Return a node for an existing CID. Its metadata is fetched
        on first access.

        :param str cid: CID of the file or directory
        :param str name: display name
        """
        return FileSystemNode(self, cid, name=name, **kwargs)

    async def add(self, stream, name: str = '',
                  options: Union[AddOptions, dict] = None) -> FileSystemNode:
        """
        Add the content of a data source to the repository.

        The data is streamed to the daemon in a multipart upload, and the
        response (progress records, then the result) is decoded line by
        line as it arrives.

        :param stream: data source: bytes, a binary file object or an
            async iterable of bytes chunks. It is read once, and can't be
            reused afterwards
        :param str name: display name of the file
        :param options: :class:`AddOptions` (or a dict of its arguments)
        :rtype: :class:`FileSystemNode`
        """

        options = add_options(options)

        mpwriter = multi.multiform_stream(stream, name=name)
        records = self.mjson_decode(self.url('add'),
                                    method='post',
                                    data=mpwriter,
                                    params=options.params())

        try:
            return await self.decode_added(records, name=name,
                                           options=options)
        finally:
            await records.aclose()

    async def decode_added(self, records: AsyncIterable[dict],
                           name: str = '',
                           options: AddOptions = None) -> FileSystemNode:
        """
        Consume the records of an add response, reporting the progress
        records to the options' progress observer, and return the node
        for the last result record.

        :raises NoFileAddedError: the response had no result record
        """

        options = add_options(options)
        added = None

        async for record in records:
            if not isinstance(record, dict):
                raise ProtocolError(f'Unexpected add record: {record!r}')

            if is_progress_record(record):
                await options.report(TransferProgress(
                    name=record.get('Name', ''),
                    bytes=record_size(record, PROGRESS_KEY)
                ))
                continue

            cid = record.get('Hash')
            if not cid:
                raise ProtocolError(f'Add record without a CID: {record!r}')

            # Last result wins
            added = (cid, record_size(record, 'Size'))

            log.debug(f'added {cid} {name}')

        if added is None:
            raise NoFileAddedError()

        cid, size = added
        return FileSystemNode(
            self,
            cid,
            name=name,
            size=size,
            is_directory=options.wrap is True
        )

    async def add_bytes(self, data: bytes, name: str = '',
                        options: Union[AddOptions, dict] = None):
        """
        Add a file using given bytes as data.

        :param bytes data: file data
        :param str name: file name
        """
        return await self.add(data, name=name, options=options)

    async def add_str(self, data: str, name: str = '', codec='utf-8',
                      options: Union[AddOptions, dict] = None):
        """
        Add a file using given string as data

        :param str data: string data
        :param str codec: input codec, default utf-8
        """
        return await self.add(data.encode(codec), name=name,
                              options=options)

    async def add_json(self, data, name: str = '',
                       options: Union[AddOptions, dict] = None):
        """
        Add a JSON-serializable object as a file

        :param data: json object
        """
        return await self.add_str(json.dumps(data), name=name,
                                  options=options)

    async def add_file(self, filepath,
                       options: Union[AddOptions, dict] = None):
        """
        Add a file from the local filesystem, named after its basename.

        :param str filepath: path of the file
        """

        with open(filepath, 'rb') as fd:
            return await self.add(fd, name=os.path.basename(filepath),
                                  options=options)

    async def add_parts(self, *parts,
                        options: Union[AddOptions, dict] = None):
        """
        Add several files, one add call per file.

        This is an async generator yielding a node for every file added.

        :param parts: (name, stream) tuples
        """

        for name, stream in parts:
            yield await self.add(stream, name=name, options=options)

    async def ls(self, path: str) -> FileSystemNode:
        """
        List a file or directory, returning a fully resolved node.

        This is the metadata lookup used by :class:`FileSystemNode`.

        :param str path: CID or IPFS path of the entry
        :rtype: :class:`FileSystemNode`
        """

        reply = await self.fetch_json(self.url('file/ls'),
                                      params={ARG_PARAM: path})
        if not reply:
            raise ProtocolError(f'No response from file/ls for {path}')

        try:
            cid = reply['Arguments'][path]
            obj = reply['Objects'][cid]

            links = [
                FileSystemLink(
                    name=link.get('Name', ''),
                    id=link['Hash'],
                    size=record_size(link, 'Size')
                ) for link in obj.get('Links') or []
            ]
        except (KeyError, TypeError, AttributeError) as err:
            raise ProtocolError(
                f'Invalid file/ls response for {path}: {err}') from err

        return FileSystemNode(
            self,
            obj.get('Hash', cid),
            size=record_size(obj, 'Size'),
            is_directory=obj.get('Type') == 'Directory',
            links=links
        )

    async def cat(self, path, offset=None, length=None) -> bytes:
        """
        Read the content of a file.

        :param str path: The path of the IPFS object to retrieve
        :param int offset: byte offset to begin reading from
        :param int length: maximum number of bytes to read
        """

        params = {ARG_PARAM: path}

        if offset is not None and isinstance(offset, int):
            params['offset'] = offset
        if length is not None and isinstance(length, int):
            params['length'] = length

        return await self.fetch_raw(self.url('cat'), params=params)

    async def read_text(self, path, codec='utf-8') -> str:
        """
        Read the content of a file as text.

        :param str path: The path of the IPFS object to retrieve
        :param str codec: text codec, default utf-8
        """

        data = await self.cat(path)
        return data.decode(codec)

    async def get(self, path, compress=False, compression_level=-1,
                  chunk_size=16384):
        """
        Download an IPFS object as a TAR archive.

        This is an async generator yielding the archive's chunks as they
        are received.

        :param str path: The path of the IPFS object to retrieve
        :param bool compress: Compress the output with GZIP compression
        :param int compression_level: The level of compression (1-9)
        """

        params = {
            ARG_PARAM: path,
            'archive': boolarg(True),
            'compress': boolarg(compress),
            'compression-level': str(compression_level)
        }

        try:
            async with self.driver.session.post(self.url('get'),
                                                params=params) as response:
                if response.status != 200:
                    self.handle_error(response, await response.read())

                while True:
                    chunk = await response.content.read(chunk_size)
                    if not chunk:
                        break

                    yield chunk
        except TRANSPORT_ERRORS as err:
            raise self.transport_error(self.url('get'), err) from err
