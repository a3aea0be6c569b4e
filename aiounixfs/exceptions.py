import re


class InvalidNodeAddressError(Exception):
    pass


class TransportError(Exception):
    """
    Base class for the errors raised when the call to the daemon itself
    failed (unreachable daemon, error status, broken payload)
    """


class IPFSConnectionError(TransportError):
    pass


class APIError(TransportError):
    """
    IPFS API error

    :param int code: IPFS error code
    :param str message: Error message
    :param int http_status: HTTP status code
    """

    def __init__(self, code=-1, message='', http_status=-1):
        super().__init__(message)

        self.code = code
        self.message = message
        self.http_status = http_status

    @classmethod
    def match(cls, message: str):
        """
        :param str message: Error message string returned by kubo
        :rtype: bool
        """
        return False


class EndpointNotFoundError(APIError):
    """
    Exception for when a RPC endpoint is not found (HTTP 404)
    """


class InvalidCIDError(APIError):
    """
    Invalid CID or selected encoding not supported
    """

    @classmethod
    def match(cls, message: str):
        return message.lower().endswith(
            'invalid cid: selected encoding not supported'
        ) or re.search(r'invalid (path|cid)', message.lower()) is not None


class NoSuchLinkError(APIError):
    """
    No link by that name
    """

    @classmethod
    def match(cls, message: str):
        return message == 'no link by that name' or \
            message.startswith('no link named')


class PathNotFoundError(APIError):
    """
    The path or CID could not be resolved by the daemon
    """

    @classmethod
    def match(cls, message: str):
        msg = message.lower()
        return 'not found' in msg or 'could not resolve' in msg


class UnknownAPIError(APIError):
    pass


class ProtocolError(Exception):
    """
    The daemon answered, but the response does not have the
    expected shape
    """


class NoFileAddedError(ProtocolError):
    """
    An add response ended without any result record
    """

    def __init__(self, message='No file added'):
        super().__init__(message)
