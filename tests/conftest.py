import pytest
import pytest_asyncio

import asyncio
import io
import json
import socket
import tarfile

from contextlib import closing

from aiohttp import web
from aiohttp.test_utils import TestServer

import aiounixfs


CIDV0 = 'QmPZ9gcCEpqKTo6aq61g2nXGUhM4iCL3ewB6LDXZCtioEB'
CIDV1_RAW = 'bafkreiewqrl3s3cgd4ll3wybtrxv7futfksuylocfxzlugbjparmyyt6eq'


def unused_tcp_port():
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def small_tar(name='hello.txt', data=b'hello'):
    buff = io.BytesIO()
    with tarfile.open(fileobj=buff, mode='w') as tar:
        info = tarfile.TarInfo(name)
        info.size = len(data)
        tar.addfile(info, io.BytesIO(data))
    return buff.getvalue()


class FakeDaemon:
    """
    In-process stand-in for the kubo RPC API, serving the endpoints
    used by the client and recording the requests it receives.
    """

    def __init__(self):
        self.add_records = []
        self.add_lines = None
        self.add_error = None
        self.add_stall = False
        self.status = None
        self.release = asyncio.Event()

        self.add_params = []
        self.uploads = []
        self.ls_calls = []
        self.objects = {}
        self.files = {}
        self.blocks = {}

    def error(self, message, status=500, code=0):
        return web.json_response({
            'Message': message,
            'Code': code,
            'Type': 'error'
        }, status=status)

    async def add(self, request):
        self.add_params.append(dict(request.query))

        reader = await request.multipart()
        part = await reader.next()
        self.uploads.append((part.filename, await part.read()))

        if self.add_error:
            return self.error(self.add_error)

        resp = web.StreamResponse(
            headers={'Content-Type': 'application/json'})
        await resp.prepare(request)

        if self.add_lines is not None:
            for line in self.add_lines:
                await resp.write(line)
        else:
            for record in self.add_records:
                await resp.write(json.dumps(record).encode() + b'\n')

        if self.add_stall:
            await self.release.wait()
            return resp

        await resp.write_eof()
        return resp

    async def file_ls(self, request):
        path = request.query['arg']
        self.ls_calls.append(path)

        obj = self.objects.get(path)
        if obj is None:
            return self.error(
                f'merkledag: not found ({path})')

        return web.json_response({
            'Arguments': {path: obj['Hash']},
            'Objects': {obj['Hash']: obj}
        })

    async def cat(self, request):
        data = self.files.get(request.query['arg'])
        if data is None:
            return self.error('block was not found locally (offline)')

        offset = int(request.query.get('offset', 0))
        length = request.query.get('length')
        end = offset + int(length) if length is not None else None
        return web.Response(body=data[offset:end])

    async def get(self, request):
        data = self.files.get(request.query['arg'])
        if data is None:
            return self.error('block was not found locally (offline)')

        return web.Response(body=small_tar(data=data),
                            content_type='application/x-tar')

    async def block_put(self, request):
        reader = await request.multipart()
        part = await reader.next()
        data = await part.read()

        if request.query.get('cid-codec') == 'empty':
            return web.Response(body=b'')

        self.blocks[CIDV1_RAW] = data
        return web.json_response({'Key': CIDV1_RAW, 'Size': len(data)})

    async def block_get(self, request):
        data = self.blocks.get(request.query['arg'])
        if data is None:
            return self.error('block was not found locally (offline)')

        return web.Response(body=data)

    async def block_stat(self, request):
        cid = request.query['arg']
        data = self.blocks.get(cid)
        if data is None:
            return self.error('invalid path "nothere": invalid cid')

        return web.json_response({'Key': cid, 'Size': len(data)})

    async def block_rm(self, request):
        cid = request.query['arg']
        if self.blocks.pop(cid, None) is None:
            return web.json_response({'Hash': cid,
                                      'Error': 'block not found'})

        return web.json_response({'Hash': cid})

    async def id(self, request):
        return web.json_response({'ID': '12D3KooWFakeDaemon',
                                  'AgentVersion': 'kubo/0.26.0/'})

    def app(self):
        @web.middleware
        async def forced_status(request, handler):
            # Bare error status, as a proxy in front of the daemon sends
            if self.status is None:
                return await handler(request)

            await request.read()
            return web.Response(status=self.status,
                                text='upstream unavailable')

        app = web.Application(middlewares=[forced_status])
        app.router.add_post('/api/v0/add', self.add)
        app.router.add_post('/api/v0/file/ls', self.file_ls)
        app.router.add_post('/api/v0/cat', self.cat)
        app.router.add_post('/api/v0/get', self.get)
        app.router.add_post('/api/v0/block/put', self.block_put)
        app.router.add_post('/api/v0/block/get', self.block_get)
        app.router.add_post('/api/v0/block/stat', self.block_stat)
        app.router.add_post('/api/v0/block/rm', self.block_rm)
        app.router.add_post('/api/v0/id', self.id)
        return app


@pytest.fixture
def testfile1(tmpdir):
    filep = tmpdir.join('testfile1.txt')
    filep.write('POIEKJDOOOPIDMWOPIMPOWE()=ds129084bjcy')
    return filep


@pytest_asyncio.fixture
async def fakedaemon():
    daemon = FakeDaemon()
    server = TestServer(daemon.app(), host='127.0.0.1')
    await server.start_server()

    yield daemon, server

    daemon.release.set()
    await server.close()


@pytest_asyncio.fixture
async def iclient(fakedaemon):
    daemon, server = fakedaemon
    client = aiounixfs.AsyncUnixFS(host='127.0.0.1', port=server.port)
    yield client
    await client.close()
