import base64
import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from . import config
from .shared.errors import AuthorizationError, DependencyError, Unauthenticated

logger = logging.getLogger(__name__)

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)

ROLE_ADMIN = "admin"
ROLE_WORKER = "worker"
ROLE_CLIENT = "client"
ROLES = (ROLE_ADMIN, ROLE_WORKER, ROLE_CLIENT)
STAFF_ROLES = (ROLE_ADMIN, ROLE_WORKER)

security = HTTPBearer(auto_error=False)

# Cache for Google's public keys
_cached_keys = None


@dataclass(frozen=True)
class Principal:
    """The verified caller of a request"""

    uid: str
    role: str = ROLE_CLIENT
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


def _b64decode(segment: str) -> bytes:
    padding_len = 4 - len(segment) % 4
    return base64.urlsafe_b64decode(segment + ("=" * padding_len if padding_len != 4 else ""))


async def get_google_public_keys(force_refresh: bool = False) -> Optional[dict]:
    """Fetch Google's public keys for Firebase token verification"""
    global _cached_keys
    if _cached_keys and not force_refresh:
        logger.debug("✅ Using cached Google public keys")
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.get(GOOGLE_CERTS_URL)
        if response.status_code == 200:
            _cached_keys = response.json()
            logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
            return _cached_keys
        logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token with full RS256 signature verification.

    Returns the decoded claims. Raises Unauthenticated for any invalid token
    and DependencyError when the identity provider cannot be consulted.
    """
    if not config.FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise DependencyError("Identity provider not configured")

    parts = token.split(".")
    if len(parts) != 3:
        raise Unauthenticated("Invalid token format")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64decode(header_b64))
    except (ValueError, UnicodeDecodeError) as e:
        logger.error(f"❌ Failed to decode token header: {str(e)}")
        raise Unauthenticated("Invalid token header") from e

    kid = header.get("kid")
    if header.get("alg") != "RS256":
        raise Unauthenticated("Invalid token algorithm")
    if not kid:
        raise Unauthenticated("Token missing key ID")

    public_keys = await get_google_public_keys()
    if not public_keys or kid not in public_keys:
        logger.warning(f"⚠️ Key ID {kid} not found in public keys, refreshing")
        public_keys = await get_google_public_keys(force_refresh=True)
        if public_keys is None:
            raise DependencyError("Unable to fetch identity provider keys")
        if kid not in public_keys:
            raise Unauthenticated("Unable to verify token signature")

    cert = load_pem_x509_certificate(public_keys[kid].encode(), default_backend())
    try:
        signature = _b64decode(signature_b64)
        cert.public_key().verify(
            signature,
            f"{header_b64}.{payload_b64}".encode(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except Exception as e:
        logger.error(f"❌ Token signature verification failed: {str(e)}")
        raise Unauthenticated("Invalid token signature") from e

    try:
        claims = json.loads(_b64decode(payload_b64))
    except (ValueError, UnicodeDecodeError) as e:
        raise Unauthenticated("Invalid token payload") from e

    check_claims(claims, config.FIREBASE_PROJECT_ID)
    logger.debug(f"✅ Token verified for user: {claims.get('email')}")
    return claims


def check_claims(claims: dict, project_id: str, now: Optional[float] = None) -> None:
    """Validate audience, issuer and lifetime claims of a decoded Firebase token"""
    now = time.time() if now is None else now

    if claims.get("aud") != project_id:
        raise Unauthenticated("Invalid token audience")
    if claims.get("iss") != f"https://securetoken.google.com/{project_id}":
        raise Unauthenticated("Invalid token issuer")
    if claims.get("exp", 0) < now:
        raise Unauthenticated("Token has expired. Please refresh your session.")
    # Allow 60 seconds clock skew
    if claims.get("iat", 0) > now + 60:
        raise Unauthenticated("Invalid token")
    if "auth_time" not in claims:
        raise Unauthenticated("Invalid token claims")


def principal_from_claims(claims: dict) -> Principal:
    """Map decoded token claims to a Principal; unknown roles become client"""
    # Firebase ID tokens use 'sub' as the user ID claim, not 'uid'
    uid = claims.get("sub") or claims.get("user_id") or claims.get("uid")
    if not uid:
        raise Unauthenticated("Invalid token claims")

    role = claims.get("role")
    if role not in ROLES:
        role = ROLE_CLIENT

    return Principal(uid=uid, role=role, email=claims.get("email"), name=claims.get("name"))


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Principal:
    """Resolve the caller from the bearer token"""
    if not credentials or not credentials.credentials:
        raise Unauthenticated(
            "Not authenticated. Please provide a valid Bearer token in the Authorization header."
        )

    claims = await verify_firebase_token(credentials.credentials)
    return principal_from_claims(claims)


def ensure_role(principal: Principal, *roles: str) -> None:
    if principal.role not in roles:
        logger.warning(f"⚠️ {principal.uid} ({principal.role}) denied, needs one of {roles}")
        raise AuthorizationError("Insufficient permissions")


def require_roles(*roles: str):
    """Build a dependency that only admits the given roles"""

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        ensure_role(principal, *roles)
        return principal

    return dependency
