#!/usr/bin/env python3
"""Sign a captured Keyspaces nonce with the local AWS credentials.

Prints the response payload a client would send for the given challenge,
which helps when comparing against a server-side verification failure.
"""

import argparse
import asyncio
import datetime
import logging
import os
import sys

from keyspaces_sigv4 import AuthenticationError, Boto3CredentialSource, KeyspacesAuthenticator


def _parse_timestamp(value: str) -> datetime.datetime:
    return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))


async def sign_challenge(challenge: str, region: str | None, profile: str | None, timestamp=None) -> str:
    source = Boto3CredentialSource(region=region, profile_name=profile)
    clock = (lambda: timestamp) if timestamp else None
    authenticator = KeyspacesAuthenticator(source, clock=clock)
    _, session = authenticator.start_session("sign_challenge")
    response = await session.on_challenge(challenge.encode("utf-8"))
    return response.decode("utf-8")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sign a Keyspaces SigV4 nonce challenge")
    parser.add_argument("challenge", help='Challenge text, e.g. "nonce=abc123"')
    parser.add_argument(
        "--region",
        default=os.environ.get("AWS_REGION"),
        help="AWS region (default: from AWS_REGION env var or profile)"
    )
    parser.add_argument("--profile", default=os.environ.get("AWS_PROFILE"), help="AWS profile name")
    parser.add_argument(
        "--timestamp",
        type=_parse_timestamp,
        help="Signing instant in ISO 8601 (default: now)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        print(asyncio.run(sign_challenge(args.challenge, args.region, args.profile, args.timestamp)))
    except AuthenticationError as e:
        print(f"Error: {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)
