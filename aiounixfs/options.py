import inspect

from typing import Callable, NamedTuple, Optional, Union

from aiounixfs.helpers import boolarg


DEFAULT_HASH = 'sha2-256'


class TransferProgress(NamedTuple):
    """
    Progress notification sent by the daemon during an add

    :param str name: name of the entry being added
    :param int bytes: number of bytes processed so far
    """

    name: str
    bytes: int


ProgressObserver = Callable[[TransferProgress], object]


class AddOptions:
    """
    Options for the add RPC call.

    Every option defaults to None, which means "let the daemon decide":
    only the options that differ from the daemon's defaults are sent.

    :param bool pin: Pin the added content (daemon default: true)
    :param bool wrap: Wrap the file in a directory object
    :param bool raw_leaves: Use raw blocks for leaf nodes
    :param bool only_hash: Only chunk and hash, do not write to disk
    :param bool trickle: Use the trickle-dag layout
    :param str hash: Hash function to use
    :param str chunker: Chunking algorithm, e.g "size-262144"
    :param progress: progress observer, a function or a coroutine
        function receiving a :class:`TransferProgress`
    """

    def __init__(self,
                 pin: Optional[bool] = None,
                 wrap: Optional[bool] = None,
                 raw_leaves: Optional[bool] = None,
                 only_hash: Optional[bool] = None,
                 trickle: Optional[bool] = None,
                 hash: Optional[str] = None,
                 chunker: Optional[str] = None,
                 progress: Optional[ProgressObserver] = None):
        self.pin = pin
        self.wrap = wrap
        self.raw_leaves = raw_leaves
        self.only_hash = only_hash
        self.trickle = trickle
        self.hash = hash
        self.chunker = chunker
        self.progress = progress

    def __repr__(self):
        set_opts = ', '.join(
            f'{name}={value!r}' for name, value in vars(self).items()
            if value is not None
        )
        return f'AddOptions({set_opts})'

    def params(self) -> dict:
        """
        Return the query parameters for these options, leaving out
        everything that matches the daemon's defaults.
        """

        params = {}

        if self.pin is False:
            params['pin'] = boolarg(False)

        switches = [
            ('wrap', 'wrap-with-directory'),
            ('raw_leaves', 'raw-leaves'),
            ('only_hash', 'only-hash'),
            ('trickle', 'trickle')
        ]

        for attr, param in switches:
            if getattr(self, attr) is True:
                params[param] = boolarg(True)

        if self.progress is not None:
            params['progress'] = boolarg(True)

        if isinstance(self.hash, str) and self.hash != DEFAULT_HASH:
            params['hash'] = self.hash

        if isinstance(self.chunker, str) and self.chunker.strip():
            params['chunker'] = self.chunker

        return params

    async def report(self, progress: TransferProgress) -> None:
        """
        Deliver a progress event to the observer, if there is one
        """

        if self.progress is None:
            return

        result = self.progress(progress)
        if inspect.isawaitable(result):
            await result


def add_options(options: Union[AddOptions, dict, None]) -> AddOptions:
    if options is None:
        return AddOptions()
    elif isinstance(options, dict):
        return AddOptions(**options)
    elif isinstance(options, AddOptions):
        return options

    raise TypeError(f'Invalid add options: {options!r}')
