from unittest import TestCase

import requests

import blockcrack.server as server
from blockcrack.cbc_attack import recover_CBC_plaintext
from blockcrack.ecb_attack import recover_ECB_suffix
from blockcrack.remote import RemoteECBOracle, RemotePaddingOracle
from blockcrack.utils import bytes_to_hex, hex_to_bytes, random_bytes

class FlaskSession(object):
    """Stands in for requests.Session, routing GETs to a Flask test client"""

    def __init__(self, client):
        self.client = client

    def get(self, url, params=None, timeout=None):
        flask_response = self.client.get(url, query_string=params)
        response = requests.Response()
        response.status_code = flask_response.status_code
        response._content = flask_response.data
        response.encoding = 'utf-8'
        response.url = url
        return response

class CrashingSession(FlaskSession):
    """Every request fails the way an unhandled server exception would"""

    def get(self, url, params=None, timeout=None):
        response = super().get(url, params=params, timeout=timeout)
        response.status_code = 500
        response._content = b'Internal Server Error'
        return response

class OracleServer(TestCase):

    def setUp(self):
        server.app.testing = True
        self.client = server.app.test_client()

    def test_server(self):
        response = self.client.get('/')
        self.assertEqual(response.data, b'OK')
        self.assertEqual(response.status_code, 200)

    def test_encrypt(self):
        response = self.client.get('/encrypt?data='+bytes_to_hex(bytes(16)))
        self.assertEqual(response.status_code, 200)
        cipher = hex_to_bytes(response.data.decode())
        self.assertEqual(len(cipher), 32)
        response = self.client.get('/encrypt?data=zz')
        self.assertEqual(response.status_code, 400)

    def test_check(self):
        token = hex_to_bytes(self.client.get('/token').data.decode())
        good_get = '/check?cipher='+bytes_to_hex(token[16:])
        bad_get = '/check?cipher='+bytes_to_hex(random_bytes(count=7))
        response = self.client.get(good_get)
        self.assertEqual(response.status_code, 200)
        response = self.client.get(bad_get)
        self.assertEqual(response.status_code, 500)
        response = self.client.get('/check?cipher=xyz')
        self.assertEqual(response.status_code, 400)

    def test_remote_ECB(self):
        oracle = RemoteECBOracle('http://localhost', session=FlaskSession(self.client))
        self.assertEqual(recover_ECB_suffix(oracle.encrypt), server.SECRET_SUFFIX)

    def test_remote_padding_oracle(self):
        oracle = RemotePaddingOracle('http://localhost/', session=FlaskSession(self.client))
        token = oracle.token()
        self.assertEqual(len(token), 48)
        self.assertEqual(recover_CBC_plaintext(token, oracle.is_padding_valid),
                         server.SECRET_TOKEN)

    def test_remote_errors(self):
        oracle = RemotePaddingOracle('http://localhost/nowhere', session=FlaskSession(self.client))
        self.assertRaises(requests.HTTPError, oracle.is_padding_valid, bytes(16))

    def test_server_failure(self):
        session = CrashingSession(self.client)
        oracle = RemotePaddingOracle('http://localhost/', session=session)
        self.assertRaises(requests.HTTPError, oracle.is_padding_valid, bytes(32))
