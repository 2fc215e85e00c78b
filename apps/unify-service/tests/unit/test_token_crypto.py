import pytest
from cryptography.fernet import Fernet

from unify.utils import token_crypto


def test_generated_tokens_are_unique_and_sized():
    assert token_crypto.generate_connection_token() != token_crypto.generate_connection_token()
    assert len(token_crypto.generate_reset_token()) == 64
    assert len(token_crypto.generate_webhook_secret()) == 64


def test_hash_api_key_is_stable_sha256():
    digest = token_crypto.hash_api_key("raw-key")
    assert digest == token_crypto.hash_api_key("raw-key")
    assert len(digest) == 64
    assert digest != token_crypto.hash_api_key("other-key")


def test_sign_and_verify_payload():
    body = b'{"type":"ticketing.ticket.created"}'
    signature = token_crypto.sign_payload("secret", body)
    assert token_crypto.verify_signature("secret", body, signature)
    assert not token_crypto.verify_signature("wrong", body, signature)
    assert not token_crypto.verify_signature("secret", body + b" ", signature)
    assert not token_crypto.verify_signature("secret", body, None)


def test_encrypt_decrypt_with_passphrase():
    ciphertext = token_crypto.encrypt_credential("provider-token")
    assert ciphertext and "provider-token" not in ciphertext
    assert token_crypto.decrypt_credential(ciphertext) == "provider-token"


def test_encrypt_decrypt_with_raw_fernet_key(monkeypatch):
    monkeypatch.setenv("CREDENTIALS_ENCRYPTION_KEY", Fernet.generate_key().decode())
    ciphertext = token_crypto.encrypt_credential("abc")
    assert token_crypto.decrypt_credential(ciphertext) == "abc"


def test_empty_credentials_pass_through():
    assert token_crypto.encrypt_credential(None) is None
    assert token_crypto.encrypt_credential("") is None
    assert token_crypto.decrypt_credential(None) is None


def test_decrypt_with_rotated_key_raises(monkeypatch):
    ciphertext = token_crypto.encrypt_credential("abc")
    monkeypatch.setenv("CREDENTIALS_ENCRYPTION_KEY", "a-different-passphrase")
    with pytest.raises(ValueError):
        token_crypto.decrypt_credential(ciphertext)


def test_missing_encryption_key(monkeypatch):
    monkeypatch.delenv("CREDENTIALS_ENCRYPTION_KEY", raising=False)
    with pytest.raises(ValueError):
        token_crypto.encrypt_credential("abc")
