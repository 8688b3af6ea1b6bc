from flask import Blueprint, request, jsonify, current_app, make_response
from flask_jwt_extended import (
    create_access_token, create_refresh_token, jwt_required,
    get_jwt_identity, get_jwt, decode_token
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from fuelstation.models import User, TokenBlocklist
from fuelstation.extensions import db, limiter
from utils.audit import log_event
from utils.decorators import auth_required, current_user
from datetime import datetime, timezone
import re

auth_bp = Blueprint('auth', __name__)
USERNAME_PATTERN = re.compile(r'^[\w.@+-]{3,}$')
# Covers /refresh and /logout so logout can revoke the refresh token too.
REFRESH_COOKIE_PATH = '/api/auth'


def _issue_access_token(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role.name if user.role else None, "station_id": user.station_id}
    )


def _set_cookie(response, name, token, max_age, path):
    response.set_cookie(
        name,
        token,
        max_age=max_age,
        httponly=True,
        secure=current_app.config["JWT_COOKIE_SECURE"],
        samesite=current_app.config["JWT_COOKIE_SAMESITE"],
        path=path
    )


def _blocklist_entry(claims, user_id):
    expires = datetime.fromtimestamp(claims["exp"], tz=timezone.utc).replace(tzinfo=None)
    return TokenBlocklist(jti=claims["jti"], token_type=claims["type"],
                          user_id=int(user_id), expires_at=expires)


def _refresh_cookie_claims():
    token = request.cookies.get("refresh_token_cookie")
    if not token:
        return None
    try:
        claims = decode_token(token)
    except (JWTExtendedException, PyJWTError):
        return None
    if claims.get("type") != "refresh":
        return None
    if TokenBlocklist.query.filter_by(jti=claims["jti"]).first():
        return None
    return claims


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute", override_defaults=False)
def login():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    ip = request.remote_addr

    if not username or not password:
        return jsonify({"error": "Username and password are required"}), 400

    if not USERNAME_PATTERN.match(username):
        return jsonify({"error": "Invalid username format"}), 400

    user = User.query.filter_by(username=username, deleted=False).first()

    if user and user.check_password(password):
        access_token = _issue_access_token(user)
        refresh_token = create_refresh_token(identity=str(user.id))

        response = make_response(jsonify({"token": access_token, "user": user.to_dict()}))
        access_expires = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
        refresh_expires = current_app.config["JWT_REFRESH_TOKEN_EXPIRES"]
        _set_cookie(response, "access_token_cookie", access_token,
                    int(access_expires.total_seconds()), "/")
        _set_cookie(response, "refresh_token_cookie", refresh_token,
                    int(refresh_expires.total_seconds()), REFRESH_COOKIE_PATH)

        log_event("LOGIN_SUCCESS", user_id=user.id, ip=ip, description=f"{username} logged in")
        return response

    log_event("LOGIN_FAILED", ip=ip, description=f"Failed login attempt for {username}", level="WARNING")
    return jsonify({"error": "Invalid username or password"}), 401


@auth_bp.route('/me', methods=['GET'])
@auth_required()
def get_current_user():
    user = current_user()
    return jsonify(user.to_dict()), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_access_token():
    user = current_user()
    if not user:
        return jsonify({"error": "User not found"}), 401

    access_token = _issue_access_token(user)
    response = make_response(jsonify({"token": access_token}))
    access_expires = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    _set_cookie(response, "access_token_cookie", access_token,
                int(access_expires.total_seconds()), "/")

    log_event("REFRESH_TOKEN", user_id=user.id, ip=request.remote_addr)
    return response


@auth_bp.route("/logout", methods=["POST"])
@auth_required()
def logout():
    claims = get_jwt()
    user_id = get_jwt_identity()
    db.session.add(_blocklist_entry(claims, user_id))

    refresh_claims = _refresh_cookie_claims()
    if refresh_claims and refresh_claims["sub"] == user_id:
        db.session.add(_blocklist_entry(refresh_claims, user_id))
    db.session.commit()

    response = make_response(jsonify({"message": "Successfully logged out"}))
    response.delete_cookie("access_token_cookie", path="/")
    response.delete_cookie("refresh_token_cookie", path=REFRESH_COOKIE_PATH)

    log_event("LOGOUT", user_id=user_id, ip=request.remote_addr)
    return response
