# Posts, comments, likes and the feed
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from forms import require_content
from errors import NotFound
from models import Comment, Like, Post, User

logger = logging.getLogger(__name__)


def _isoformat(value):
    return value.isoformat() if value else None


def _post_row(post, author):
    return {
        "id": post.id,
        "user_id": post.user_id,
        "content": post.content,
        "image_url": post.image_url,
        "created_at": _isoformat(post.created_at),
        "username": author.username,
        "profile_picture_url": author.profile_picture_url,
    }


def create_post(session, user_id, content, image_url=None):
    require_content(content, 'Post content cannot be empty.')

    post = Post(user_id=user_id, content=content, image_url=image_url or None)
    try:
        session.add(post)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise

    logger.info('User %s created post %s', user_id, post.id)
    return post.id


def get_post(session, post_id):
    """Return a post with its comments (oldest first) and like count."""
    row = session.query(Post, User)\
        .join(User, User.id == Post.user_id)\
        .filter(Post.id == post_id)\
        .first()
    if row is None:
        raise NotFound('Post not found.')
    post, author = row

    comments = session.query(Comment, User)\
        .join(User, User.id == Comment.user_id)\
        .filter(Comment.post_id == post_id)\
        .order_by(Comment.created_at.asc(), Comment.id.asc())\
        .all()

    like_count = session.query(func.count(Like.id)).filter(Like.post_id == post_id).scalar()

    data = _post_row(post, author)
    data["comments"] = [
        {
            "id": comment.id,
            "post_id": comment.post_id,
            "user_id": comment.user_id,
            "content": comment.content,
            "created_at": _isoformat(comment.created_at),
            "username": comment_author.username,
            "profile_picture_url": comment_author.profile_picture_url,
        }
        for comment, comment_author in comments
    ]
    data["likeCount"] = like_count
    return data


def get_feed(session, limit=None):
    """All posts across all users, newest first, with comment and like counts."""
    comment_count = session.query(func.count(Comment.id))\
        .filter(Comment.post_id == Post.id)\
        .correlate(Post)\
        .scalar_subquery()
    like_count = session.query(func.count(Like.id))\
        .filter(Like.post_id == Post.id)\
        .correlate(Post)\
        .scalar_subquery()

    query = session.query(Post, User, comment_count.label('comment_count'), like_count.label('like_count'))\
        .join(User, User.id == Post.user_id)\
        .order_by(Post.created_at.desc(), Post.id.desc())
    if limit:
        query = query.limit(limit)

    feed = []
    for post, author, comments, likes in query.all():
        data = _post_row(post, author)
        data["commentCount"] = comments
        data["likeCount"] = likes
        feed.append(data)
    return feed


def add_comment(session, post_id, user_id, content):
    # The post is not looked up first; the foreign key rejects unknown ids
    require_content(content, 'Comment content cannot be empty.')

    comment = Comment(post_id=post_id, user_id=user_id, content=content)
    try:
        session.add(comment)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise

    logger.info('User %s commented on post %s', user_id, post_id)
    return comment.id


def has_liked(session, post_id, user_id):
    return session.query(Like).filter_by(post_id=post_id, user_id=user_id).first() is not None


def toggle_like(session, post_id, user_id):
    """Like the post if the user hasn't yet, otherwise remove the like."""
    existing_like = session.query(Like).filter_by(
        post_id=post_id,
        user_id=user_id
    ).first()

    try:
        if existing_like:
            session.delete(existing_like)
            liked = False
        else:
            session.add(Like(post_id=post_id, user_id=user_id))
            liked = True
        session.commit()
    except IntegrityError:
        session.rollback()
        raise

    logger.debug('User %s %s post %s', user_id, 'liked' if liked else 'unliked', post_id)
    return {"liked": liked}
