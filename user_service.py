# User accounts and follow relationships
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from auth import hash_password, issue_token, verify_password
from errors import Conflict, NotFound, Unauthorized, ValidationError
from forms import is_blank, require_fields, validate_email
from models import Follower, Post, User

logger = logging.getLogger(__name__)

BAD_CREDENTIALS = 'Invalid username or password.'


def register(session, username, email, password, profile_picture_url=None):
    """Create a user and return its id."""
    require_fields(
        {'username': username, 'email': email, 'password': password},
        ['username', 'email', 'password'],
    )
    if not validate_email(email):
        raise ValidationError('Invalid email format.')

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        profile_picture_url=profile_picture_url or None,
    )
    try:
        session.add(user)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict('Username or email already exists.')

    logger.info('Registered user %s (id=%s)', user.username, user.id)
    return user.id


def login(session, username, password):
    """Check credentials and return ``(token, {"id", "username"})``.

    Unknown usernames and wrong passwords fail with the same message.
    """
    if is_blank(username) or is_blank(password):
        raise ValidationError('Username and password are required.')

    user = session.query(User).filter_by(username=username).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning('Failed login attempt for %r', username)
        raise Unauthorized(BAD_CREDENTIALS)

    token = issue_token(user.id, user.username)
    logger.info('User %s logged in', user.username)
    return token, {"id": user.id, "username": user.username}


def get_profile(session, user_id):
    user = session.get(User, user_id)
    if user is None:
        raise NotFound('User not found.')

    # Counts are read fresh on every request
    post_count = session.query(func.count(Post.id)).filter(Post.user_id == user_id).scalar()
    follower_count = session.query(func.count(Follower.id)).filter(Follower.followed_id == user_id).scalar()
    following_count = session.query(func.count(Follower.id)).filter(Follower.follower_id == user_id).scalar()

    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "bio": user.bio,
        "profile_picture_url": user.profile_picture_url,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "postCount": post_count,
        "followerCount": follower_count,
        "followingCount": following_count,
    }


def _find_edge(session, follower_id, followed_id):
    return session.query(Follower).filter_by(
        follower_id=follower_id,
        followed_id=followed_id
    ).first()


def follow_user(session, follower_id, followed_id):
    if follower_id == followed_id:
        raise ValidationError('You cannot follow yourself.')

    if _find_edge(session, follower_id, followed_id) is not None:
        raise Conflict('You are already following this user.')

    try:
        session.add(Follower(follower_id=follower_id, followed_id=followed_id))
        session.commit()
    except IntegrityError:
        session.rollback()
        # A concurrent follow wins the unique constraint; anything else
        # (e.g. an unknown followed user) is a plain server error.
        if _find_edge(session, follower_id, followed_id) is not None:
            raise Conflict('You are already following this user.')
        raise

    logger.info('User %s followed user %s', follower_id, followed_id)


def unfollow_user(session, follower_id, followed_id):
    deleted = session.query(Follower).filter_by(
        follower_id=follower_id,
        followed_id=followed_id
    ).delete()
    session.commit()
    if not deleted:
        raise NotFound('Follow relationship not found.')

    logger.info('User %s unfollowed user %s', follower_id, followed_id)


def is_following(session, follower_id, user_id):
    return _find_edge(session, follower_id, user_id) is not None
