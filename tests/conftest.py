"""
Fixtures used in the tests
"""
import pytest

from bitverify.crypto import SECP256K1, PubKey
from bitverify.script import ScriptEngine, ValidatorConfig
from bitverify.validation import ScriptValidator, SignatureEngine
from tests.randbtc_generators import getrand_privkey


@pytest.fixture()
def script_engine():
    return ScriptEngine()


@pytest.fixture()
def validator():
    return ScriptValidator()


@pytest.fixture()
def strict_validator():
    return ScriptValidator(ValidatorConfig(permissive_retry=False, sentinel_fallback=False, lax_der=False))


@pytest.fixture()
def sig_engine():
    return SignatureEngine()


@pytest.fixture()
def keypair():
    priv_key = getrand_privkey()
    return priv_key, PubKey(priv_key)


@pytest.fixture()
def curve():
    return SECP256K1
