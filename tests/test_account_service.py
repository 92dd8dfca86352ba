"""Tests for registration, verification and session issuance."""

import pytest

from jobdesk.core.exceptions import (
    AccountExistsError,
    AccountNotVerifiedError,
    InvalidCredentialsError,
    InvalidOtpError,
    UnauthenticatedError,
)
from jobdesk.core.security import REFRESH_TOKEN, token_codec


async def register_and_verify(service, sent_codes, email="jane@example.com"):
    user = await service.register(name="Jane", email=email, password="s3cret!")
    await service.verify_otp(user.id, sent_codes[email])
    return user


class TestRegister:
    """Tests for AccountService.register."""

    @pytest.mark.asyncio
    async def test_register_sends_code(self, account_service, sent_codes, fake_redis):
        user = await account_service.register(
            name="Jane", email="Jane@Example.com", password="s3cret!"
        )

        assert user.email == "jane@example.com"
        assert user.is_verified is False
        code = sent_codes["jane@example.com"]
        assert len(code) == 6 and code.isdigit()
        assert fake_redis.data[f"otp:{user.id}"] == code
        assert fake_redis.ttls[f"otp:{user.id}"] == 600

    @pytest.mark.asyncio
    async def test_reregister_unverified_rearms(self, account_service, sent_codes):
        first = await account_service.register(
            name="Jane", email="jane@example.com", password="s3cret!"
        )
        second = await account_service.register(
            name="Janet", email="jane@example.com", password="other-pass"
        )
        assert first.id == second.id
        assert second.name == "Janet"

    @pytest.mark.asyncio
    async def test_verified_email_taken(self, account_service, sent_codes):
        await register_and_verify(account_service, sent_codes)

        with pytest.raises(AccountExistsError):
            await account_service.register(
                name="Jane", email="jane@example.com", password="s3cret!"
            )


class TestVerifyOtp:
    """Tests for AccountService.verify_otp."""

    @pytest.mark.asyncio
    async def test_verify(self, account_service, sent_codes, fake_redis):
        user = await account_service.register(
            name="Jane", email="jane@example.com", password="s3cret!"
        )

        verified = await account_service.verify_otp(user.id, sent_codes["jane@example.com"])

        assert verified.is_verified is True
        assert f"otp:{user.id}" not in fake_redis.data

    @pytest.mark.asyncio
    async def test_wrong_code(self, account_service, sent_codes):
        user = await account_service.register(
            name="Jane", email="jane@example.com", password="s3cret!"
        )
        wrong = "000000" if sent_codes["jane@example.com"] != "000000" else "111111"

        with pytest.raises(InvalidOtpError):
            await account_service.verify_otp(user.id, wrong)

    @pytest.mark.asyncio
    async def test_expired_code(self, account_service, sent_codes, fake_redis):
        user = await account_service.register(
            name="Jane", email="jane@example.com", password="s3cret!"
        )
        fake_redis.data.pop(f"otp:{user.id}")

        with pytest.raises(InvalidOtpError):
            await account_service.verify_otp(user.id, sent_codes["jane@example.com"])

    @pytest.mark.asyncio
    async def test_attempts_exhausted(self, account_service, sent_codes):
        """After too many wrong codes even the right one is refused."""
        user = await account_service.register(
            name="Jane", email="jane@example.com", password="s3cret!"
        )
        code = sent_codes["jane@example.com"]
        wrong = "000000" if code != "000000" else "111111"
        for _ in range(5):
            with pytest.raises(InvalidOtpError):
                await account_service.verify_otp(user.id, wrong)

        with pytest.raises(InvalidOtpError) as exc_info:
            await account_service.verify_otp(user.id, code)
        assert "Too many attempts" in exc_info.value.message


class TestLogin:
    """Tests for login and refresh."""

    @pytest.mark.asyncio
    async def test_login_issues_tokens(self, account_service, sent_codes):
        user = await register_and_verify(account_service, sent_codes)

        issued = await account_service.login("jane@example.com", "s3cret!")

        claims = token_codec.verify(issued.token)
        assert claims.id == str(user.id)
        assert claims.email == "jane@example.com"
        assert claims.is_admin is False
        assert token_codec.verify(issued.refresh_token, token_type=REFRESH_TOKEN).id == str(
            user.id
        )

    @pytest.mark.asyncio
    async def test_wrong_password(self, account_service, sent_codes):
        await register_and_verify(account_service, sent_codes)
        with pytest.raises(InvalidCredentialsError):
            await account_service.login("jane@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_unknown_email(self, account_service):
        with pytest.raises(InvalidCredentialsError):
            await account_service.login("ghost@example.com", "whatever")

    @pytest.mark.asyncio
    async def test_unverified_account(self, account_service):
        await account_service.register(name="Jane", email="jane@example.com", password="s3cret!")
        with pytest.raises(AccountNotVerifiedError):
            await account_service.login("jane@example.com", "s3cret!")

    @pytest.mark.asyncio
    async def test_refresh(self, account_service, sent_codes):
        await register_and_verify(account_service, sent_codes)
        issued = await account_service.login("jane@example.com", "s3cret!")

        refreshed = await account_service.refresh(issued.refresh_token)

        assert token_codec.verify(refreshed.token).email == "jane@example.com"

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, account_service, sent_codes):
        await register_and_verify(account_service, sent_codes)
        issued = await account_service.login("jane@example.com", "s3cret!")

        with pytest.raises(UnauthenticatedError):
            await account_service.refresh(issued.token)

    @pytest.mark.asyncio
    async def test_refresh_missing(self, account_service):
        with pytest.raises(UnauthenticatedError):
            await account_service.refresh(None)

    @pytest.mark.asyncio
    async def test_ensure_admin(self, account_service):
        admin = await account_service.ensure_admin("Root@Example.com", "adminpass")
        assert admin.is_admin is True

        issued = await account_service.login("root@example.com", "adminpass")
        assert token_codec.verify(issued.token).is_admin is True
