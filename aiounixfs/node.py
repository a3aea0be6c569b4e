import asyncio
import enum
import logging

from typing import List, NamedTuple, Optional

from aiounixfs.helpers import cid_decode


log = logging.getLogger(__name__)


class FileSystemLink(NamedTuple):
    """
    A named link to a child entry of a directory (or to a file chunk)
    """

    name: str
    id: str
    size: int

    @property
    def cid(self):
        return cid_decode(self.id)


class NodeState(enum.Enum):
    FRESH = 'fresh'
    PARTIAL = 'partial'
    RESOLVED = 'resolved'


class FileSystemNode:
    """
    A UnixFS entry (file or directory) identified by its CID.

    The directory flag, the size and the links are fetched from the
    daemon the first time one of them is needed (a single *file/ls* call
    fills all three), and are then cached on the node for good. Fields
    given to the constructor are never fetched nor overwritten.

    Because of this, :meth:`is_directory`, :meth:`size` and
    :meth:`links` are coroutines, and can raise the same errors as any
    RPC call.

    :param fs: the UnixFS API used to resolve the metadata, it needs to
        provide an *ls(path)* coroutine returning a resolved node
    :param str id: CID of the entry
    :param str name: display name ('' for unnamed entries)
    :param int size: size, if already known
    :param bool is_directory: directory flag, if already known
    :param list links: child links, if already known
    """

    def __init__(self, fs, id: str,
                 name: str = '',
                 size: Optional[int] = None,
                 is_directory: Optional[bool] = None,
                 links: Optional[List[FileSystemLink]] = None):
        if not id:
            raise ValueError('A FileSystemNode needs a CID')

        self._fs = fs
        self._id = str(id)
        self._name = name if name else ''
        self._size = size
        self._is_directory = is_directory
        self._links = list(links) if links is not None else None
        # Created on first lookup, inside the running loop
        self._resolve_lock = None

    def __repr__(self):
        return (f'FileSystemNode(id={self._id!r}, name={self._name!r}, '
                f'state={self.state.value})')

    @property
    def id(self) -> str:
        return self._id

    @property
    def cid(self):
        """
        The CID as a multiformats_cid object (CIDv0 or CIDv1)
        """
        return cid_decode(self._id)

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> NodeState:
        fields = [self._is_directory, self._size, self._links]

        if all(f is not None for f in fields):
            return NodeState.RESOLVED
        elif any(f is not None for f in fields):
            return NodeState.PARTIAL

        return NodeState.FRESH

    @property
    def resolving(self) -> bool:
        return self._resolve_lock is not None and \
            self._resolve_lock.locked()

    async def is_directory(self) -> bool:
        """
        Returns True if this entry is a directory
        """

        if self._is_directory is None:
            await self._resolve(lambda: self._is_directory is not None)

        return self._is_directory

    async def size(self) -> int:
        """
        Returns the size of this entry, in bytes
        """

        if self._size is None:
            await self._resolve(lambda: self._size is not None)

        return self._size

    async def links(self) -> List[FileSystemLink]:
        """
        Returns the links of this entry (an empty list for a file
        or an empty directory)
        """

        if self._links is None:
            await self._resolve(lambda: self._links is not None)

        return list(self._links)

    async def to_link(self, name: str = '') -> FileSystemLink:
        """
        Returns a link pointing to this entry

        :param str name: link name, the node's name is used if empty
        """

        return FileSystemLink(
            name=name if name and name.strip() else self.name,
            id=self.id,
            size=await self.size()
        )

    async def read(self, offset: int = None, length: int = None) -> bytes:
        """
        Read the content of this file

        :param int offset: byte offset to begin reading from
        :param int length: maximum number of bytes to read
        """

        return await self._fs.cat(self.id, offset=offset, length=length)

    async def _resolve(self, done) -> None:
        if self._resolve_lock is None:
            self._resolve_lock = asyncio.Lock()

        # One lookup per node at a time, readers arriving while a lookup
        # is in flight wait for it and then read the cached fields
        async with self._resolve_lock:
            if done():
                return

            log.debug(f'Resolving metadata for {self.id}')

            info = await self._fs.ls(self.id)
            is_directory, size, links = (await info.is_directory(),
                                         await info.size(),
                                         await info.links())

            # No suspension point from here on
            if self._is_directory is None:
                self._is_directory = is_directory
            if self._size is None:
                self._size = size
            if self._links is None:
                self._links = links
