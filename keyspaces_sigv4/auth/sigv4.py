"""
AWS SigV4 signing for Amazon Keyspaces (for Apache Cassandra).

This module computes the challenge response a Cassandra client returns to a
Keyspaces endpoint during the SigV4 handshake. The server hands out a nonce;
the client signs a canonical ``PUT /authenticate`` request that embeds the
nonce hash and returns the signature together with the access key id and
timestamp. The secret key never leaves the process.

Everything here is a pure function of its inputs. The literal tokens
(``cassandra``, ``aws4_request``, ``AWS4``, the verb and path, the query
parameter order) are part of the wire contract with the verifier.

Usage:
    from keyspaces_sigv4.auth import build_signed_response

    response = build_signed_response(
        region="us-east-1",
        nonce="abc123",
        access_key_id="AKIDEXAMPLE",
        secret="examplesecret",
        session_token=None,
        timestamp=datetime.datetime(2022, 1, 1, tzinfo=datetime.timezone.utc),
    )
    # "signature=...,access_key=AKIDEXAMPLE,amzdate=2022-01-01T00:00:00.000Z"
"""

import datetime
import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "cassandra"
REQUEST_TYPE = "aws4_request"
EXPIRES_SECONDS = 900

_RESPONSE_FIELDS = ("signature", "access_key", "amzdate", "session_token")


@dataclass(frozen=True)
class Credentials:
    """AWS credentials for SigV4 signing."""
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class SigningContext:
    """Per-handshake signing inputs, sampled once."""
    region: str
    timestamp: datetime.datetime
    nonce: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", normalize_timestamp(self.timestamp))

    @property
    def date_stamp(self) -> str:
        return to_datestamp(self.timestamp)

    @property
    def amz_date(self) -> str:
        return to_amz_date(self.timestamp)

    @property
    def scope(self) -> str:
        return compute_scope(self.timestamp, self.region)


@dataclass(frozen=True)
class SignedResponse:
    """
    The payload returned to the server in answer to a nonce challenge.

    Attributes:
        signature: Lowercase hex HMAC-SHA256 signature
        access_key_id: Access key id the signature was made with
        amz_date: ISO 8601 timestamp with millisecond precision
        session_token: Temporary session token, if any
    """
    signature: str
    access_key_id: str
    amz_date: str
    session_token: Optional[str] = field(default=None, repr=False)

    def to_text(self) -> str:
        """Serialize to the comma-separated ``key=value`` wire form."""
        result = (
            f"signature={self.signature},"
            f"access_key={self.access_key_id},"
            f"amzdate={self.amz_date}"
        )
        if self.session_token:
            result = f"{result},session_token={self.session_token}"
        return result

    def to_bytes(self) -> bytes:
        return self.to_text().encode("utf-8")

    @classmethod
    def parse(cls, text: str) -> "SignedResponse":
        """
        Parse the wire form back into a SignedResponse.

        Args:
            text: Response text as produced by ``to_text``

        Returns:
            Parsed SignedResponse

        Raises:
            ValueError: If fields are missing, unknown or out of order
        """
        pairs = []
        for part in text.split(","):
            key, sep, value = part.partition("=")
            if not sep:
                raise ValueError(f"Malformed response field: {key!r}")
            pairs.append((key, value))

        keys = tuple(key for key, _ in pairs)
        if keys not in (_RESPONSE_FIELDS[:3], _RESPONSE_FIELDS):
            raise ValueError(f"Unexpected response fields: {', '.join(keys)}")

        values = dict(pairs)
        return cls(
            signature=values["signature"],
            access_key_id=values["access_key"],
            amz_date=values["amzdate"],
            session_token=values.get("session_token"),
        )


def normalize_timestamp(timestamp: datetime.datetime) -> datetime.datetime:
    """
    Convert a timestamp to UTC and truncate it to milliseconds.

    Naive datetimes are taken to be UTC already.
    """
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=datetime.timezone.utc)
    else:
        timestamp = timestamp.astimezone(datetime.timezone.utc)
    return timestamp.replace(microsecond=timestamp.microsecond - timestamp.microsecond % 1000)


def to_datestamp(timestamp: datetime.datetime) -> str:
    """Date in YYYYMMDD format (UTC)."""
    return normalize_timestamp(timestamp).strftime("%Y%m%d")


def to_amz_date(timestamp: datetime.datetime) -> str:
    """ISO 8601 timestamp with millisecond precision, e.g. 2022-01-01T00:00:00.000Z."""
    t = normalize_timestamp(timestamp)
    return t.strftime("%Y-%m-%dT%H:%M:%S.") + f"{t.microsecond // 1000:03d}Z"


def compute_scope(timestamp: datetime.datetime, region: str) -> str:
    """Credential scope binding the signature to a date, region and service."""
    return f"{to_datestamp(timestamp)}/{region}/{SERVICE}/{REQUEST_TYPE}"


def _sign(key: bytes, msg: str) -> bytes:
    """Create HMAC-SHA256 signature."""
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def _hash_payload(payload: str) -> str:
    """Create SHA256 hash of the payload."""
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _encode(value: str) -> str:
    return quote(value, safe="-_.~")


def form_canonical_request(
    access_key_id: str,
    scope: str,
    timestamp: datetime.datetime,
    nonce: str,
) -> str:
    """
    Create the canonical request string for the authenticate call.

    Args:
        access_key_id: AWS access key id
        scope: Credential scope from ``compute_scope``
        timestamp: Signing instant
        nonce: Nonce extracted from the server challenge

    Returns:
        Canonical request string
    """
    # Fixed order, not sorted
    query_string = "&".join([
        f"X-Amz-Algorithm={ALGORITHM}",
        f"X-Amz-Credential={access_key_id}%2F{_encode(scope)}",
        f"X-Amz-Date={_encode(to_amz_date(timestamp))}",
        f"X-Amz-Expires={EXPIRES_SECONDS}",
    ])

    return "\n".join([
        "PUT",
        "/authenticate",
        query_string,
        f"host:{SERVICE}",
        "",
        "host",
        _hash_payload(nonce),
    ])


def derive_signing_key(
    secret_access_key: str,
    timestamp: datetime.datetime,
    region: str,
) -> bytes:
    """
    Derive the signing key for SigV4.

    Args:
        secret_access_key: AWS secret access key
        timestamp: Signing instant (only the UTC date is used)
        region: AWS region

    Returns:
        Derived signing key
    """
    k_date = _sign(f"AWS4{secret_access_key}".encode("utf-8"), to_datestamp(timestamp))
    k_region = _sign(k_date, region)
    k_service = _sign(k_region, SERVICE)
    k_signing = _sign(k_service, REQUEST_TYPE)
    return k_signing


def create_string_to_sign(
    canonical_request: str,
    timestamp: datetime.datetime,
    scope: str,
) -> str:
    """Create the string to sign for SigV4."""
    return "\n".join([
        ALGORITHM,
        to_amz_date(timestamp),
        scope,
        _hash_payload(canonical_request),
    ])


def create_signature(
    canonical_request: str,
    timestamp: datetime.datetime,
    scope: str,
    signing_key: bytes,
) -> str:
    """Lowercase hex signature over the string to sign."""
    string_to_sign = create_string_to_sign(canonical_request, timestamp, scope)
    return hmac.new(
        signing_key,
        string_to_sign.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def sign(context: SigningContext, credentials: Credentials) -> SignedResponse:
    """
    Sign a handshake.

    Scope and timestamp come from the same context so the canonical request
    and the string to sign always agree.

    Args:
        context: Region, instant and nonce for this handshake
        credentials: Credentials to sign with

    Returns:
        SignedResponse ready to serialize
    """
    scope = context.scope
    canonical_request = form_canonical_request(
        access_key_id=credentials.access_key_id,
        scope=scope,
        timestamp=context.timestamp,
        nonce=context.nonce,
    )
    signing_key = derive_signing_key(
        credentials.secret_access_key, context.timestamp, context.region
    )
    signature = create_signature(canonical_request, context.timestamp, scope, signing_key)

    return SignedResponse(
        signature=signature,
        access_key_id=credentials.access_key_id,
        amz_date=context.amz_date,
        session_token=credentials.session_token,
    )


def build_signed_response(
    region: str,
    nonce: str,
    access_key_id: str,
    secret: str,
    session_token: Optional[str],
    timestamp: datetime.datetime,
) -> str:
    """
    Build the challenge response text.

    Args:
        region: AWS region
        nonce: Nonce from the server challenge
        access_key_id: AWS access key id
        secret: AWS secret access key
        session_token: Optional temporary session token
        timestamp: Signing instant

    Returns:
        ``signature=<hex>,access_key=<id>,amzdate=<iso8601>[,session_token=<token>]``
    """
    context = SigningContext(region=region, timestamp=timestamp, nonce=nonce)
    credentials = Credentials(
        access_key_id=access_key_id,
        secret_access_key=secret,
        session_token=session_token,
    )
    return sign(context, credentials).to_text()
