#!/usr/bin/env python3
"""
Generate secret keys for a deployment.
Usage: python generate_secrets.py
"""
import secrets


def generate_secret_key(length: int = 32) -> str:
    return secrets.token_urlsafe(length)


def main():
    print("=" * 70)
    print("spacebook secret keys")
    print("=" * 70)
    print()
    print("Set these as environment variables on the server:")
    print()
    print(f"SECRET_KEY={generate_secret_key(32)}")
    print(f"JWT_SECRET_KEY={generate_secret_key(32)}")
    print()
    print("Keep them out of version control. Rotating JWT_SECRET_KEY")
    print("invalidates every issued token.")
    print("=" * 70)


if __name__ == "__main__":
    main()
