"""Reference vectors for the Keyspaces SigV4 handshake.

Computed independently with ``openssl dgst`` from the documented algorithm.
The signing key chain was cross-checked against the AWS documentation
example (secret ``wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY``, 20120215,
us-east-1, iam).
"""

import datetime

REGION = "us-east-1"
ACCESS_KEY_ID = "AKIDEXAMPLE"
SECRET = "examplesecret"
NONCE = "abc123"
TIMESTAMP = datetime.datetime(2022, 1, 1, 0, 0, 0, tzinfo=datetime.timezone.utc)

SCOPE = "20220101/us-east-1/cassandra/aws4_request"
AMZ_DATE = "2022-01-01T00:00:00.000Z"
NONCE_SHA256 = "6ca13d52ca70c883e0f0bb101e425a89e8624de51db2d2392593af6a84118090"
CANONICAL_REQUEST = (
    "PUT\n"
    "/authenticate\n"
    "X-Amz-Algorithm=AWS4-HMAC-SHA256"
    "&X-Amz-Credential=AKIDEXAMPLE%2F20220101%2Fus-east-1%2Fcassandra%2Faws4_request"
    "&X-Amz-Date=2022-01-01T00%3A00%3A00.000Z"
    "&X-Amz-Expires=900\n"
    "host:cassandra\n"
    "\n"
    "host\n"
    f"{NONCE_SHA256}"
)
CANONICAL_REQUEST_SHA256 = "4042d7fad6852ca253cc08b580e7fce13557373d8a8e98286b48940f2eefad8f"
SIGNING_KEY_HEX = "ac0a74b4d68731105859d47bad4d87b2cf28f7478c79b4900b7e9cdd97b8b160"
SIGNATURE = "7856dfdf986e7ef3ccb2b9d3fdd9d1591cd4335e9e3415e973ef84f863b94754"
RESPONSE = f"signature={SIGNATURE},access_key={ACCESS_KEY_ID},amzdate={AMZ_DATE}"
