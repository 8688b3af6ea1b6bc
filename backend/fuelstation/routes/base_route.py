from flask import Blueprint, jsonify
from sqlalchemy import text

base_bp = Blueprint("base", __name__)

@base_bp.route("/")
def home():
    return jsonify({"message": "Welcome to Fuel Station Management API"})

@base_bp.route("/api/health")
def health():
    from fuelstation.extensions import db
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "ok", "database": "up"}
    except Exception as e:
        db.session.rollback()
        return {"status": "error", "database": "down", "message": str(e)}, 500
