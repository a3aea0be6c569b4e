from typing import Optional

from .apis import SubAPI
from . import multi
from .helpers import *  # noqa
from .exceptions import *  # noqa


class Block:
    """
    A raw IPFS block

    :param str id: CID of the block
    :param bytes data: the block's data, if it was fetched
    :param int size: block size, defaults to the data's length
    """

    def __init__(self, id: str, data: bytes = b'', size: int = None):
        self.id = id
        self.data = data
        self._size = size

    @property
    def size(self) -> int:
        return self._size if self._size is not None else len(self.data)

    def __repr__(self):
        return f'Block(id={self.id!r}, size={self.size})'


class BlockAPI(SubAPI):
    async def get(self, cid):
        """
        Get a raw IPFS block.

        :param str cid: The cid of an existing block to get
        :rtype: :py:class:`bytes`
        """

        data = await self.fetch_raw(self.url('block/get'),
                                    params={ARG_PARAM: cid})
        return data if data else b''

    async def put(self, data,
                  cid_codec: str = 'raw',
                  mhtype: Optional[str] = None,
                  pin: Optional[bool] = None,
                  allow_big_block: Optional[bool] = None) -> Block:
        """
        Store input as an IPFS block.

        :param data: block data (bytes, or a binary file object)
        :param str cid_codec: Multicodec to use in returned CID
        :param str mhtype: multihash hash function
        :param bool pin: pin block
        :param bool allow_big_block: Disable block size check and allow
            creation of blocks bigger than 1MiB
        """

        params = {}

        if cid_codec != 'raw':
            params['cid-codec'] = cid_codec

        if isinstance(mhtype, str):
            params['mhtype'] = mhtype

        if pin is not None:
            params['pin'] = boolarg(pin)

        if allow_big_block is not None:
            params['allow-big-block'] = boolarg(allow_big_block)

        reply = await self.post(self.url('block/put'),
                                data=multi.multiform_stream(data),
                                params=params,
                                outformat='json')
        if not reply:
            raise ProtocolError('No response from block/put')

        size = reply.get('Size')
        if size is None and isinstance(data, bytes):
            size = len(data)

        return Block(reply.get('Key', ''), size=size_value(size))

    async def stat(self, cid) -> Block:
        """
        Print information of a raw IPFS block.

        :param str cid: The cid of an existing block to stat
        """

        reply = await self.fetch_json(self.url('block/stat'),
                                      params={ARG_PARAM: cid})
        if not reply:
            raise ProtocolError('No response from block/stat')

        return Block(reply.get('Key', ''),
                     size=size_value(reply.get('Size')))

    async def rm(self, cid, force=False):
        """
        Remove an IPFS block, returning its CID.

        :param str cid: The cid of an existing block to remove
        :param bool force: Ignore nonexistent blocks
        """

        params = {
            ARG_PARAM: cid,
            'force': boolarg(force)
        }

        reply = await self.fetch_text(self.url('block/rm'), params=params)
        if not reply:
            return cid

        result = decode_json(reply.encode())
        if result.get('Error'):
            raise APIError(message=result['Error'])

        return result.get('Hash', cid)


class CoreAPI(SubAPI):
    async def id(self, peer: str = None):
        """
        Show IPFS node id info.

        :param str peer: peer id to look up, otherwise shows local node info
        """
        params = {ARG_PARAM: peer} if peer else {}
        return await self.fetch_json(self.url('id'), params=params)

    async def version(self):
        """
        Show ipfs version information
        """
        return await self.fetch_json(self.url('version'))
