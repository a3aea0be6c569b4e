import json
import asyncio
import logging

from aiohttp.web_exceptions import HTTPNotFound
from aiohttp.http_exceptions import LineTooLong
from aiohttp.client_exceptions import (ClientError,
                                       ClientPayloadError,
                                       ClientConnectorError,
                                       ServerDisconnectedError)

from aiounixfs.helpers import *  # noqa
from aiounixfs.exceptions import *  # noqa


log = logging.getLogger(__name__)

TRANSPORT_ERRORS = (ClientPayloadError,
                    ClientConnectorError,
                    ServerDisconnectedError,
                    ClientError,
                    asyncio.TimeoutError)


class SubAPI:
    """
    Master class for all classes implementing API functions

    :param driver: the AsyncUnixFS instance
    """

    def __init__(self, driver):
        self.driver = driver

    @property
    def debug(self):
        return self.driver is not None and self.driver.debug

    def url(self, path):
        return self.driver.api_endpoint(path)

    def decode_error(self, errormsg):
        """
        Decode a (JSON) error message from the daemon and
        return a tuple (text_message, error_code)
        """
        try:
            decoded_json = json.loads(errormsg)
            mtype = decoded_json.get('Type')
            assert mtype.lower() == 'error'
            return decoded_json['Message'], decoded_json['Code']
        except Exception:
            return None, None

    def handle_error(self, response, data):
        """
        When the daemon returns an HTTP error status (4xx, 5xx), this
        method is called to raise an API exception.
        """

        if response.status == HTTPNotFound.status_code:
            # 404
            raise EndpointNotFoundError(
                message=f'Endpoint for URL: {response.url} NOT FOUND',
                http_status=response.status
            )

        msg, code = self.decode_error(data)

        if isinstance(msg, str) and code is not None:
            # Check for specific errors

            for errclass in [InvalidCIDError,
                             NoSuchLinkError,
                             PathNotFoundError]:
                if errclass.match(msg) is True:
                    raise errclass(
                        code=code,
                        message=msg,
                        http_status=response.status
                    )

            # Otherwise raise a generic error
            raise APIError(code=code,
                           message=msg,
                           http_status=response.status)
        else:
            raise UnknownAPIError(http_status=response.status)

    def transport_error(self, url, err):
        if self.debug:
            log.debug(f'{url}: aiohttp error: {err}')

        return IPFSConnectionError(f'{url}: connection/payload error: {err}')

    async def fetch_text(self, url, params={}):
        return await self.post(url, params=params, outformat='text')

    async def fetch_raw(self, url, params={}):
        return await self.post(url, params=params, outformat='raw')

    async def fetch_json(self, url, params={}):
        return await self.post(url, params=params, outformat='json')

    async def post(self, url, data=None, headers={}, params={},
                   outformat='text'):
        try:
            async with self.driver.session.post(url, data=data,
                                                headers=headers,
                                                params=params) as response:
                if not response.ok:
                    return self.handle_error(
                        response, await response.read()
                    )

                if outformat == 'text':
                    return await response.text()
                elif outformat == 'json':
                    try:
                        return await response.json(content_type=None)
                    except ValueError as err:
                        raise ProtocolError(
                            f'{url}: invalid JSON response: {err}'
                        ) from err
                elif outformat == 'raw':
                    return await response.read()
                else:
                    raise ValueError(
                        f'Unknown output format {outformat}')
        except APIError as apierr:
            if self.debug:
                log.debug(f'{url}: Post API error: {apierr}')

            raise apierr
        except TRANSPORT_ERRORS as err:
            raise self.transport_error(url, err) from err

    async def mjson_decode(self, url, method='post', data=None,
                           params=None, headers=None):
        """
        Multiple JSON objects response decoder (async generator), used for
        the API endpoints which return multiple JSON messages, one per line.

        Lines are read and decoded one at a time, the response is never
        buffered entirely.

        :param str method: http method, get or post
        :param data: data, for POST only
        :param params: http params
        """

        kwargs = {'params': params if params else {}}

        if method not in ['get', 'post']:
            raise ValueError('mjson_decode: unknown method')

        if method == 'post':
            if data is not None:
                kwargs['data'] = data

        if isinstance(headers, dict):
            kwargs['headers'] = headers

        session = self.driver.session

        try:
            async with getattr(session, method)(url, **kwargs) as response:
                if not response.ok:
                    self.handle_error(response, await response.read())

                async for raw_message in response.content:
                    if not raw_message.strip():
                        continue

                    try:
                        message = decode_json(raw_message)
                    except ValueError as err:
                        raise ProtocolError(
                            f'{url}: undecodable JSON record: {err}'
                        ) from err

                    if message is not None:
                        if isinstance(message, dict) and \
                                'Message' in message and 'Code' in message:
                            self.handle_error(response, raw_message)
                        else:
                            yield message

                    await asyncio.sleep(0)
        except (APIError, ProtocolError) as err:
            if self.debug:
                log.debug(f'{url}: API error: {err}')

            raise err
        except TRANSPORT_ERRORS as err:
            raise self.transport_error(url, err) from err
        except (LineTooLong, ValueError) as err:
            # Record over the stream reader's line limit
            raise ProtocolError(
                f'{url}: response line too long: {err}'
            ) from err
