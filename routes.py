# Routes for handling requests
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

import post_service
import user_service
from auth import current_user_id
from forms import parse_id
from models import db

api_bp = Blueprint('api', __name__)


def _json_body():
    # Bodies that are not JSON objects count as empty
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# Authentication Endpoints
@api_bp.route('/register', methods=['POST'])
def register():
    """User Registration Endpoint"""
    data = _json_body()
    user_id = user_service.register(
        db.session,
        data.get('username'),
        data.get('email'),
        data.get('password'),
        # older clients send the picture link as ImgLink
        data.get('profilePictureUrl') or data.get('ImgLink'),
    )
    return jsonify({"message": "User registered successfully!", "userId": user_id}), 201


@api_bp.route('/login', methods=['POST'])
def login():
    """User Login Endpoint"""
    data = _json_body()
    token, user = user_service.login(db.session, data.get('username'), data.get('password'))
    return jsonify({"message": "Login successful!", "token": token, "user": user}), 200


# User Endpoints
@api_bp.route('/users/<int:user_id>', methods=['GET'])
def get_profile(user_id):
    return jsonify(user_service.get_profile(db.session, user_id)), 200


@api_bp.route('/users/follow', methods=['POST'])
@jwt_required()
def follow_user():
    data = _json_body()
    followed_id = parse_id(data.get('followedId'), 'followedId is required.')
    user_service.follow_user(db.session, current_user_id(), followed_id)
    return jsonify({"message": "User followed successfully."}), 200


@api_bp.route('/users/<int:followed_id>/unfollow', methods=['DELETE'])
@jwt_required()
def unfollow_user(followed_id):
    user_service.unfollow_user(db.session, current_user_id(), followed_id)
    return jsonify({"message": "User unfollowed successfully."}), 200


@api_bp.route('/users/<int:user_id>/is-following', methods=['GET'])
@jwt_required()
def is_following(user_id):
    following = user_service.is_following(db.session, current_user_id(), user_id)
    return jsonify({"isFollowing": following}), 200


# Post & Feed Endpoints
@api_bp.route('/posts/feed', methods=['GET'])
@jwt_required()
def get_feed():
    feed = post_service.get_feed(db.session, limit=current_app.config.get('FEED_LIMIT'))
    return jsonify(feed), 200


@api_bp.route('/posts', methods=['POST'])
@jwt_required()
def create_post():
    data = _json_body()
    post_id = post_service.create_post(
        db.session,
        current_user_id(),
        data.get('content'),
        data.get('imageUrl'),
    )
    return jsonify({"message": "Post created successfully!", "postId": post_id}), 201


@api_bp.route('/posts/<int:post_id>', methods=['GET'])
@jwt_required()
def get_post(post_id):
    return jsonify(post_service.get_post(db.session, post_id)), 200


@api_bp.route('/posts/<int:post_id>/comments', methods=['POST'])
@jwt_required()
def add_comment(post_id):
    data = _json_body()
    comment_id = post_service.add_comment(db.session, post_id, current_user_id(), data.get('content'))
    return jsonify({"message": "Comment added successfully!", "commentId": comment_id}), 201


@api_bp.route('/posts/<int:post_id>/like', methods=['POST'])
@jwt_required()
def toggle_like(post_id):
    result = post_service.toggle_like(db.session, post_id, current_user_id())
    message = "Post liked successfully." if result["liked"] else "Post unliked successfully."
    return jsonify({"message": message, **result}), 200


@api_bp.route('/posts/<int:post_id>/like-status', methods=['GET'])
@jwt_required()
def like_status(post_id):
    return jsonify({"liked": post_service.has_liked(db.session, post_id, current_user_id())}), 200
