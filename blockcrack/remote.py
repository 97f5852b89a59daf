import logging

import requests

from .utils import bytes_to_hex, hex_to_bytes

"""Clients for the oracle HTTP service. Their bound methods plug straight
into recover_ECB_suffix and recover_CBC_plaintext."""

log = logging.getLogger(__name__)

class RemoteOracle(object):

    def __init__(self, url, session=None, timeout=5):
        self._url = url.rstrip('/')
        self._session = requests.Session() if session is None else session
        self._timeout = timeout

    def _get(self, path, **params):
        return self._session.get(self._url+path, params=params, timeout=self._timeout)

class RemoteECBOracle(RemoteOracle):

    def encrypt(self, data):
        response = self._get('/encrypt', data=bytes_to_hex(data))
        response.raise_for_status()
        return hex_to_bytes(response.text)

class RemotePaddingOracle(RemoteOracle):

    def token(self):
        """IV-prepended ciphertext of the service's secret"""
        response = self._get('/token')
        response.raise_for_status()
        return hex_to_bytes(response.text)

    def is_padding_valid(self, cipher):
        """200 means valid padding, a 500 with body BAD means invalid. Any
        other 500 is a server failure, not an answer, and raises HTTPError
        like every other status."""
        response = self._get('/check', cipher=bytes_to_hex(cipher))
        if response.status_code == 200:
            return True
        if response.status_code == 500 and response.text == 'BAD':
            return False
        log.warning('unexpected status %d from padding oracle', response.status_code)
        response.raise_for_status()
        raise requests.HTTPError('unexpected status {}'.format(response.status_code),
                                 response=response)
