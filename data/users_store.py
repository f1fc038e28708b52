"""Locally registered users with salted password hashes."""
import hashlib
import hmac
import os
import sqlite3
from typing import Optional
from data.database import Database
from data.models import UserRecord


class UserExistsError(Exception):
    """A user with this email is already registered."""
    pass


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(password: str, salt: str) -> str:
    """PBKDF2-SHA512, 10000 iterations, hex encoded."""
    return hashlib.pbkdf2_hmac("sha512", password.encode(), salt.encode(), 10000, 64).hex()


class UsersStore:
    """Create and verify local users."""

    def __init__(self, db: Database):
        self.db = db

    def create_user(self, email: str, password: str) -> UserRecord:
        key = normalize_email(email)
        if not key or not password:
            raise ValueError("email and password are required")
        salt = os.urandom(16).hex()
        record = UserRecord(email=key, password_hash=hash_password(password, salt), salt=salt)
        try:
            self.db.execute(
                "INSERT INTO users (email, password_hash, salt, created_at) VALUES (?, ?, ?, ?)",
                (record.email, record.password_hash, record.salt, record.created_at),
            )
        except sqlite3.IntegrityError:
            raise UserExistsError(f"User already exists: {key}")
        return record

    def get_user(self, email: str) -> Optional[UserRecord]:
        row = self.db.fetchone(
            "SELECT email, password_hash, salt, created_at FROM users WHERE email = ?",
            (normalize_email(email),),
        )
        if row is None:
            return None
        return UserRecord(email=row["email"], password_hash=row["password_hash"],
                          salt=row["salt"], created_at=int(row["created_at"]))

    def validate_password(self, email: str, password: str) -> bool:
        user = self.get_user(email)
        if user is None:
            return False
        return hmac.compare_digest(hash_password(password, user.salt), user.password_hash)
