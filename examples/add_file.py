#!/usr/bin/env python
#
# Example: add a file with progress reporting, then list a directory
#

import sys

import aiounixfs
import asyncio


def progress(p):
    print(f'{p.name}: {p.bytes} bytes', file=sys.stderr)


async def add(path):
    async with aiounixfs.AsyncUnixFS() as cli:
        try:
            node = await cli.add_file(
                path,
                options=aiounixfs.AddOptions(wrap=True, progress=progress)
            )

            print('Added', node.id)

            for link in await node.links():
                print(link.name, link.id, link.size)
        except aiounixfs.APIError as e:
            print(e.message)
        except aiounixfs.IPFSConnectionError as e:
            print(f'Daemon unreachable: {e}')

if __name__ == '__main__':
    asyncio.run(add(sys.argv[1]))
