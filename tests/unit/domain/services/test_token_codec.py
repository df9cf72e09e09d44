from datetime import timedelta

import pytest

from src.core.exceptions import TokenGenerationError
from src.domain.services.auth.token_codec import TokenCodec
from src.domain.value_objects.token_pair import TokenPair
from tests.utils.fakes import seeded_random_source


def test_generate_token_is_hex_of_requested_entropy(codec):
    token = codec.generate_token()

    assert len(token) == 64
    int(token, 16)


def test_generated_tokens_differ(codec):
    assert codec.generate_token() != codec.generate_token()


def test_seeded_sources_are_reproducible(clock):
    first = TokenCodec(clock, random_source=seeded_random_source(7))
    second = TokenCodec(clock, random_source=seeded_random_source(7))

    assert first.generate_token() == second.generate_token()


def test_hash_is_deterministic_sha256_hex():
    digest = TokenCodec.hash("abc")

    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert TokenCodec.hash("abc") == digest


def test_hash_of_generated_token_reproduces_stored_digest(codec):
    pair = codec.generate_token_pair(timedelta(minutes=20))

    assert TokenCodec.hash(pair.unhashed_token) == pair.hashed_token
    assert TokenCodec.matches(pair.unhashed_token, pair.hashed_token)


def test_matches_rejects_other_tokens_and_empty_values(codec):
    pair = codec.generate_token_pair(timedelta(minutes=20))

    assert not TokenCodec.matches("not-the-token", pair.hashed_token)
    assert not TokenCodec.matches("", pair.hashed_token)
    assert not TokenCodec.matches(pair.unhashed_token, "")


def test_token_pair_expiry_is_absolute(codec, clock):
    pair = codec.generate_token_pair(timedelta(minutes=20))

    assert pair.expires_at == clock.now() + timedelta(minutes=20)


def test_token_pair_expiry_is_exclusive(codec, clock):
    pair = codec.generate_token_pair(timedelta(minutes=20))

    assert not pair.is_expired(pair.expires_at - timedelta(microseconds=1))
    assert pair.is_expired(pair.expires_at)


def test_token_pair_repr_does_not_leak_unhashed_token(codec):
    pair = codec.generate_token_pair(timedelta(minutes=5))

    assert pair.unhashed_token not in repr(pair)


def test_token_pair_rejects_naive_expiry(clock):
    with pytest.raises(ValueError):
        TokenPair(unhashed_token="a", hashed_token="b", expires_at=clock.now().replace(tzinfo=None))


def test_failing_random_source_raises_token_generation_error(clock):
    def broken(n):
        raise OSError("entropy pool unavailable")

    codec = TokenCodec(clock, random_source=broken)

    with pytest.raises(TokenGenerationError):
        codec.generate_token()


def test_short_random_source_raises_token_generation_error(clock):
    codec = TokenCodec(clock, random_source=lambda n: b"\x00" * (n - 1))

    with pytest.raises(TokenGenerationError):
        codec.generate_token_pair(timedelta(minutes=1))


def test_rejects_low_entropy_configuration(clock):
    with pytest.raises(ValueError):
        TokenCodec(clock, token_bytes=16)
