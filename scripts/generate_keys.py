"""
Development key and token helper.

The pricing service only verifies bearer tokens; production tokens come
from the platform's auth service. For local work this script creates an
RSA-2048 keypair (keys/private.pem, keys/public.pem) and mints a
short-lived access token signed with the private key, so the lock
endpoints can be exercised with curl.

Usage:
    python scripts/generate_keys.py [user_id]
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

DEV_TOKEN_TTL = timedelta(hours=12)


def generate_keys(output_dir: str = "keys") -> bytes:
    """Write an RSA-2048 keypair as PEM files and return the private PEM."""
    keys_dir = Path(output_dir)
    keys_dir.mkdir(parents=True, exist_ok=True)

    private_path = keys_dir / "private.pem"
    if private_path.exists():
        print(f"Reusing existing key: {private_path.resolve()}")
        return private_path.read_bytes()

    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    private_path.write_bytes(private_pem)

    public_path = keys_dir / "public.pem"
    public_path.write_bytes(
        private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )

    print("RSA keypair generated:")
    print(f"  Private key: {private_path.resolve()}")
    print(f"  Public key:  {public_path.resolve()} (set JWT_PUBLIC_KEY_PATH)")
    return private_pem


def mint_dev_token(private_pem: bytes, user_id: str) -> str:
    """Access token in the shape ``get_current_user_id`` accepts."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "type": "access",
        "iat": now,
        "exp": now + DEV_TOKEN_TTL,
    }
    return jwt.encode(payload, private_pem, algorithm="RS256")


if __name__ == "__main__":
    project_root = Path(__file__).resolve().parent.parent
    os.chdir(project_root)
    pem = generate_keys()
    user = sys.argv[1] if len(sys.argv) > 1 else "dev-user"
    print(f"\nAccess token for {user!r}:\n{mint_dev_token(pem, user)}")
