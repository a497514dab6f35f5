"""
Credential and token primitives.

Passwords are hashed with werkzeug (scrypt); bearer tokens are HS256 JWTs
signed with the application's JWT secret.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import jwt
from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

PASSWORD_MIN_LENGTH = 8


def hash_password(password: str) -> str:
    return generate_password_hash(password, method='scrypt')


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    return check_password_hash(password_hash, password)


def validate_password_strength(password: str) -> List[str]:
    """
    Check password policy and return list of problems (empty when valid).

    Policy: at least 8 characters, one uppercase, one lowercase, one digit.
    """
    errors = []
    password = password or ''
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f'Password must be at least {PASSWORD_MIN_LENGTH} characters long')
    if not re.search(r'[A-Z]', password):
        errors.append('Password must contain at least one uppercase letter')
    if not re.search(r'[a-z]', password):
        errors.append('Password must contain at least one lowercase letter')
    if not re.search(r'[0-9]', password):
        errors.append('Password must contain at least one number')
    return errors


def issue_token(user_id: str, tenant_id: Optional[str], role: str, email: str) -> str:
    """Sign a bearer token for the given user."""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': user_id,
        'userId': user_id,
        'tenantId': tenant_id,
        'role': role,
        'email': email,
        'iat': now,
        'exp': now + timedelta(seconds=current_app.config['JWT_EXPIRES_IN']),
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET'],
        algorithm=current_app.config.get('JWT_ALGORITHM', 'HS256'),
    )


def decode_token(token: str) -> dict:
    """
    Verify signature and expiry and return the payload.

    Raises:
        jwt.ExpiredSignatureError: token expired
        jwt.InvalidTokenError: any other verification failure
    """
    return jwt.decode(
        token,
        current_app.config['JWT_SECRET'],
        algorithms=[current_app.config.get('JWT_ALGORITHM', 'HS256')],
        options={'require': ['exp', 'sub']},
    )


def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """
    Return the token from an 'Authorization: Bearer <token>' header.

    Any other scheme or shape yields None.
    """
    if not auth_header:
        return None
    parts = auth_header.split(' ')
    if len(parts) != 2 or parts[0] != 'Bearer' or not parts[1]:
        return None
    return parts[1]
