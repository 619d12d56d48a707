"""
Basic xauth usage example.

Walks through a login with throttling, then issues, validates, refreshes
and revokes a token pair against the in-memory store.
"""

import asyncio

from xauth import (
    AuthConfig,
    AuthError,
    MemoryKeyValueStore,
    StoreFailurePolicy,
    TokenService,
)


async def login(service: TokenService, username: str, password: str):
    """Toy credential check wired through the login throttle"""
    await service.check_login(username)
    if password != "correct horse":
        attempts = await service.login_failed(username)
        print(f"✗ Wrong password for {username} (attempt {attempts})")
        return None
    await service.login_succeeded(username)
    return await service.issue(user_id=f"id-{username}", username=username)


async def basic_example():
    """Demonstrate basic xauth usage"""
    print("Basic xauth Example")
    print("=" * 30)

    # Ephemeral key pair since no key_directory is configured
    config = AuthConfig(store_failure_policy=StoreFailurePolicy.FAIL_CLOSED)
    service = TokenService.from_config(config, MemoryKeyValueStore())
    print("✓ Created token service")

    try:
        await login(service, "alice", "hunter2")
        pair = await login(service, "alice", "correct horse")
        print(f"✓ Token pair issued: {pair.access_token[:20]}...")

        claims = await service.validate(pair.access_token)
        print(f"✓ Token validated for {claims.username} ({claims.token_id})")

        refreshed = await service.refresh(pair.refresh_token)
        print(f"✓ Token pair rotated: {refreshed.access_token[:20]}...")

        try:
            await service.refresh(pair.refresh_token)
        except AuthError as e:
            print(f"✓ Replayed refresh token rejected: {e.error_code} -> {e.public_dict()}")

        await service.revoke(claims.token_id)
        try:
            await service.validate(refreshed.access_token)
        except AuthError as e:
            print(f"✓ Revoked token rejected: {e.error_code}")

    finally:
        await service.close()
        print("✓ Token service closed")


if __name__ == "__main__":
    asyncio.run(basic_example())
