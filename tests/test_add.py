import pytest

import asyncio

from aiounixfs import AddOptions
from aiounixfs import NoFileAddedError
from aiounixfs import ProtocolError
from aiounixfs import TransferProgress
from aiounixfs.apis.unixfs import UnixFSAPI
from aiounixfs.apis.unixfs import is_progress_record
from aiounixfs.options import add_options


async def agen(records):
    for record in records:
        await asyncio.sleep(0)
        yield record


@pytest.fixture
def fsapi():
    # decode_added does not touch the transport
    return UnixFSAPI(None)


class TestAddOptions:
    def test_defaults_suppressed(self):
        assert AddOptions().params() == {}

        # Explicit values equal to the daemon's defaults
        assert AddOptions(pin=True, wrap=False, raw_leaves=False,
                          only_hash=False, trickle=False,
                          hash='sha2-256', chunker='  ').params() == {}

    def test_pin_false(self):
        assert AddOptions(pin=False).params() == {'pin': 'false'}

    def test_all_options(self):
        opts = AddOptions(pin=False, wrap=True, raw_leaves=True,
                          only_hash=True, trickle=True,
                          hash='sha2-512', chunker='rabin-262144',
                          progress=lambda p: None)

        assert opts.params() == {
            'pin': 'false',
            'wrap-with-directory': 'true',
            'raw-leaves': 'true',
            'only-hash': 'true',
            'trickle': 'true',
            'progress': 'true',
            'hash': 'sha2-512',
            'chunker': 'rabin-262144'
        }

        # Stable
        assert opts.params() == opts.params()

    def test_add_options_coercion(self):
        opts = AddOptions(trickle=True)
        assert add_options(opts) is opts
        assert add_options(None).params() == {}
        assert add_options({'only_hash': True}).params() == {
            'only-hash': 'true'}

        with pytest.raises(TypeError):
            add_options('pin=false')

        with pytest.raises(TypeError):
            add_options({'unknown': True})

    def test_repr(self):
        assert repr(AddOptions(pin=False)) == 'AddOptions(pin=False)'


class TestDecodeAdded:
    def test_record_discriminator(self):
        assert is_progress_record({'Name': 'f', 'Bytes': 0})
        assert not is_progress_record({'Name': 'f', 'Hash': 'bafy1',
                                       'Size': '3'})

    @pytest.mark.asyncio
    @pytest.mark.parametrize('position', [0, 1, 2, 3])
    async def test_result_position(self, fsapi, position):
        records = [{'Name': 'f', 'Bytes': b} for b in (10, 20, 30)]
        records.insert(position, {'Name': 'f', 'Hash': 'bafy1',
                                  'Size': '30'})
        events = []

        node = await fsapi.decode_added(
            agen(records), name='f',
            options=AddOptions(progress=events.append))

        assert events == [TransferProgress('f', 10),
                          TransferProgress('f', 20),
                          TransferProgress('f', 30)]
        assert node.id == 'bafy1'
        assert await node.size() == 30

    @pytest.mark.asyncio
    async def test_last_result_wins(self, fsapi):
        records = [
            {'Name': 'A', 'Hash': 'bafyA', 'Size': '1'},
            {'Name': 'B', 'Hash': 'bafyB', 'Size': '2'}
        ]

        node = await fsapi.decode_added(agen(records), name='given')
        assert node.id == 'bafyB'
        assert await node.size() == 2
        assert node.name == 'given'

    @pytest.mark.asyncio
    async def test_wrap_flag(self, fsapi):
        record = {'Hash': 'bafy123', 'Size': '42'}

        node = await fsapi.decode_added(agen([record]), name='doc.txt',
                                        options=AddOptions(wrap=True))
        assert node.id == 'bafy123'
        assert node.name == 'doc.txt'
        assert await node.size() == 42
        assert await node.is_directory() is True

        node = await fsapi.decode_added(agen([record]))
        assert node.name == ''
        assert await node.is_directory() is False

    @pytest.mark.asyncio
    async def test_missing_size(self, fsapi):
        node = await fsapi.decode_added(agen([{'Hash': 'bafy1'}]))
        assert await node.size() == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize('records', [
        [],
        [{'Name': 'f', 'Bytes': 1}],
        [{'Name': 'f', 'Bytes': 1}, {'Name': 'f', 'Bytes': 2}]
    ])
    async def test_no_file_added(self, fsapi, records):
        events = []

        with pytest.raises(NoFileAddedError):
            await fsapi.decode_added(
                agen(records), options=AddOptions(progress=events.append))

        assert len(events) == len(records)

    @pytest.mark.asyncio
    async def test_invalid_records(self, fsapi):
        with pytest.raises(ProtocolError):
            await fsapi.decode_added(agen([['not', 'an', 'object']]))

        with pytest.raises(ProtocolError):
            await fsapi.decode_added(agen([{'Name': 'f', 'Size': '3'}]))

        with pytest.raises(ProtocolError):
            await fsapi.decode_added(
                agen([{'Hash': 'bafy1', 'Size': 'abc'}]))

    @pytest.mark.asyncio
    async def test_progress_without_observer(self, fsapi):
        records = [{'Bytes': 1}, {'Hash': 'bafy1', 'Size': '1'}]
        node = await fsapi.decode_added(agen(records))
        assert node.id == 'bafy1'

    @pytest.mark.asyncio
    async def test_observer_error_propagates(self, fsapi):
        def observer(progress):
            raise RuntimeError('observer failed')

        with pytest.raises(RuntimeError):
            await fsapi.decode_added(
                agen([{'Bytes': 1}, {'Hash': 'bafy1'}]),
                options=AddOptions(progress=observer))
