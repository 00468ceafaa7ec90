# Password hashing and bearer tokens
import logging

from flask_bcrypt import Bcrypt
from flask_jwt_extended import (
    JWTManager,
    create_access_token,
    decode_token,
    get_jwt_identity,
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import PyJWTError

from errors import InvalidToken, Unauthorized, error_response

logger = logging.getLogger(__name__)

bcrypt = Bcrypt()
jwt = JWTManager()


def hash_password(plaintext):
    return bcrypt.generate_password_hash(plaintext).decode('utf-8')


def verify_password(plaintext, password_hash):
    return bcrypt.check_password_hash(password_hash, plaintext)


def issue_token(user_id, username):
    """Sign a token carrying the user id (as ``sub``) and username.

    Expiry comes from ``JWT_ACCESS_TOKEN_EXPIRES``.
    """
    return create_access_token(identity=str(user_id), additional_claims={'username': username})


def verify_token(token):
    """Decode ``token`` and return its claims, raising InvalidToken on any failure."""
    try:
        return decode_token(token)
    except (PyJWTError, JWTExtendedException) as e:
        logger.debug('Rejected token: %s', e)
        raise InvalidToken()


def current_user_id():
    return int(get_jwt_identity())


# Auth gate responses: no token is 401, a bad or expired one is 403
@jwt.unauthorized_loader
def _missing_token(reason):
    return error_response(Unauthorized('Authentication token required.'))


@jwt.invalid_token_loader
def _invalid_token(reason):
    logger.debug('Invalid token: %s', reason)
    return error_response(InvalidToken())


@jwt.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    return error_response(InvalidToken())
