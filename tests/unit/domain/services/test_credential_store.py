from datetime import timedelta

import pytest
import pytest_asyncio

from src.core.exceptions import AlreadyVerifiedError, DuplicateIdentityError, NotFoundError
from src.domain.services.auth.token_codec import TokenCodec
from tests.factories import create_fake_user


@pytest_asyncio.fixture
async def alice(credentials):
    return await credentials.create_account("Alice", " Alice@X.com ", "Passw0rd!")


@pytest.mark.asyncio
async def test_create_account_normalizes_identity_and_hashes_password(credentials, alice):
    assert alice.id is not None
    assert alice.username == "alice"
    assert alice.email == "alice@x.com"
    assert alice.hashed_password != "Passw0rd!"
    assert not alice.is_email_verified
    assert credentials.verify_password(alice, "Passw0rd!")
    assert not credentials.verify_password(alice, "wrong-password")


@pytest.mark.asyncio
async def test_create_account_rejects_duplicate_identity(credentials, alice):
    with pytest.raises(DuplicateIdentityError):
        await credentials.create_account("alice", "other@x.com", "Passw0rd!")
    with pytest.raises(DuplicateIdentityError):
        await credentials.create_account("other", "ALICE@x.com", "Passw0rd!")


@pytest.mark.asyncio
async def test_find_by_identity_accepts_username_or_email(credentials, alice):
    assert (await credentials.find_by_identity("ALICE")).id == alice.id
    assert (await credentials.find_by_identity("alice@x.com ")).id == alice.id
    assert await credentials.find_by_identity("bob") is None
    assert await credentials.find_by_identity("", "  ") is None


@pytest.mark.asyncio
async def test_consume_verification_token_is_single_use(credentials, codec, alice):
    pair = codec.generate_token_pair(timedelta(minutes=20))
    await credentials.set_verification_token(alice, pair.hashed_token, pair.expires_at)

    verified = await credentials.consume_verification_token(pair.hashed_token)

    assert verified.is_email_verified
    assert verified.email_verification_token is None
    assert verified.email_verification_token_expires_at is None
    assert verified.email_verification_consumed_token == pair.hashed_token
    assert await credentials.consume_verification_token(pair.hashed_token) is None


@pytest.mark.asyncio
async def test_consume_verification_token_expiry_boundary(credentials, codec, clock, alice):
    pair = codec.generate_token_pair(timedelta(minutes=20))
    await credentials.set_verification_token(alice, pair.hashed_token, pair.expires_at)

    clock.set(pair.expires_at)
    assert await credentials.consume_verification_token(pair.hashed_token) is None

    clock.set(pair.expires_at - timedelta(microseconds=1))
    assert (await credentials.consume_verification_token(pair.hashed_token)).is_email_verified


@pytest.mark.asyncio
async def test_new_verification_token_replaces_pending_one(credentials, codec, alice):
    first = codec.generate_token_pair(timedelta(minutes=20))
    second = codec.generate_token_pair(timedelta(minutes=20))
    await credentials.set_verification_token(alice, first.hashed_token, first.expires_at)
    await credentials.set_verification_token(alice, second.hashed_token, second.expires_at)

    assert await credentials.consume_verification_token(first.hashed_token) is None
    assert await credentials.consume_verification_token(second.hashed_token) is not None


@pytest.mark.asyncio
async def test_verification_token_is_not_stored_on_verified_account(credentials, codec, alice):
    pair = codec.generate_token_pair(timedelta(minutes=20))
    await credentials.set_verification_token(alice, pair.hashed_token, pair.expires_at)
    await credentials.consume_verification_token(pair.hashed_token)

    late = codec.generate_token_pair(timedelta(minutes=20))
    with pytest.raises(AlreadyVerifiedError):
        await credentials.set_verification_token(alice, late.hashed_token, late.expires_at)
    assert (await credentials.find_by_id(alice.id)).email_verification_token is None


@pytest.mark.asyncio
async def test_create_account_with_verification_token(credentials, codec):
    pair = codec.generate_token_pair(timedelta(minutes=20))

    bob = await credentials.create_account(
        "bob", "bob@x.com", "Passw0rd!", verification_token=pair.hashed_token, verification_expires_at=pair.expires_at
    )

    assert bob.email_verification_token == pair.hashed_token
    assert (await credentials.consume_verification_token(pair.hashed_token)).id == bob.id


@pytest.mark.asyncio
async def test_clear_verification_token(credentials, codec, alice):
    pair = codec.generate_token_pair(timedelta(minutes=20))
    await credentials.set_verification_token(alice, pair.hashed_token, pair.expires_at)

    cleared = await credentials.clear_verification_token(alice)

    assert cleared.email_verification_token is None
    assert await credentials.consume_verification_token(pair.hashed_token) is None


@pytest.mark.asyncio
async def test_consume_reset_token_clears_pair_once(credentials, codec, alice):
    pair = codec.generate_token_pair(timedelta(minutes=20))
    pending = await credentials.set_reset_token(alice, pair.hashed_token, pair.expires_at)
    assert pending.password_reset_pending

    consumed = await credentials.consume_reset_token(pair.hashed_token)

    assert consumed.forgot_password_token is None
    assert consumed.forgot_password_token_expires_at is None
    assert not consumed.password_reset_pending
    assert await credentials.consume_reset_token(pair.hashed_token) is None


@pytest.mark.asyncio
async def test_clear_reset_token(credentials, codec, alice):
    pair = codec.generate_token_pair(timedelta(minutes=20))
    await credentials.set_reset_token(alice, pair.hashed_token, pair.expires_at)

    cleared = await credentials.clear_reset_token(alice)

    assert not cleared.password_reset_pending


@pytest.mark.asyncio
async def test_set_password_clears_reset_token_and_optionally_the_session(credentials, codec, alice):
    pair = codec.generate_token_pair(timedelta(minutes=20))
    await credentials.set_reset_token(alice, pair.hashed_token, pair.expires_at)
    await credentials.set_refresh_token(alice, "refresh-token")

    kept = await credentials.set_password(alice, "NewPassw0rd!")
    assert credentials.verify_password(kept, "NewPassw0rd!")
    assert not kept.password_reset_pending
    assert kept.refresh_token == TokenCodec.hash("refresh-token")

    revoked = await credentials.set_password(alice, "OtherPassw0rd!", revoke_sessions=True)
    assert revoked.refresh_token is None


@pytest.mark.asyncio
async def test_refresh_token_is_stored_as_digest(credentials, alice):
    updated = await credentials.set_refresh_token(alice, "refresh-token")

    assert updated.refresh_token == TokenCodec.hash("refresh-token")
    assert (await credentials.set_refresh_token(alice, None)).refresh_token is None


@pytest.mark.asyncio
async def test_swap_refresh_token_is_compare_and_swap(credentials, alice):
    await credentials.set_refresh_token(alice, "t0")

    swapped = await credentials.swap_refresh_token(alice.id, "t0", "t1")
    assert swapped.refresh_token == TokenCodec.hash("t1")

    assert await credentials.swap_refresh_token(alice.id, "t0", "t2") is None
    assert (await credentials.find_by_id(alice.id)).refresh_token == TokenCodec.hash("t1")


@pytest.mark.asyncio
async def test_revoke_refresh_token_only_if_digest_unchanged(credentials, alice):
    await credentials.set_refresh_token(alice, "t1")

    assert await credentials.revoke_refresh_token(alice.id, TokenCodec.hash("t0")) is None
    revoked = await credentials.revoke_refresh_token(alice.id, TokenCodec.hash("t1"))
    assert revoked.refresh_token is None


@pytest.mark.asyncio
async def test_updates_on_missing_account_raise_not_found(credentials):
    ghost = create_fake_user(id=999)

    with pytest.raises(NotFoundError):
        await credentials.set_refresh_token(ghost, "t0")
