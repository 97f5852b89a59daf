import logging

from flask import Flask, request

from .oracles import CBCPaddingOracle, ECBSuffixOracle
from .utils import bytes_to_hex, hex_to_bytes

"""HTTP front end for the oracles, so the attacks can be run against a
remote service. Ciphertexts travel as hex strings."""

log = logging.getLogger(__name__)

SECRET_SUFFIX = b'admin-secret-42'
SECRET_TOKEN = b'YELLOW SUBMARINE IS THE KEY'

ECB_ORACLE = ECBSuffixOracle(SECRET_SUFFIX)
PADDING_ORACLE = CBCPaddingOracle()

app = Flask(__name__)

def _hex_arg(name):
    return hex_to_bytes(request.args.get(name, ''))

@app.route('/')
def basic_response():
    return 'OK', 200

@app.route('/encrypt')
def encrypt():
    try:
        data = _hex_arg('data')
    except ValueError:
        return 'malformed hex', 400
    return bytes_to_hex(ECB_ORACLE.encrypt(data)), 200

@app.route('/token')
def token():
    """The secret token under CBC, with the IV prepended"""
    cipher = PADDING_ORACLE.encrypt(SECRET_TOKEN)
    return bytes_to_hex(PADDING_ORACLE.iv+cipher), 200

@app.route('/check')
def check_padding():
    try:
        cipher = _hex_arg('cipher')
    except ValueError:
        return 'malformed hex', 400
    if PADDING_ORACLE.is_padding_valid(cipher):
        return 'OK', 200
    else:
        return 'BAD', 500

def main(port=8082):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s %(levelname)s: %(message)s'
    )
    log.info('serving oracles on port %d', port)
    app.run(port=port)

if __name__ == '__main__':
    main()
