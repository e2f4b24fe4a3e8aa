"""Password Hashing — bcrypt digests for user credentials.

Invariants:
    - Plain passwords never reach the database or the logs
    - Passwords longer than 72 bytes are rejected upstream by core rules

Design Decisions:
    - bcrypt directly (no passlib wrapper): one algorithm, no scheme registry needed
    - verify_password is the contract for whichever collaborator authenticates users
"""

import bcrypt


def hash_password(password: str) -> str:
    digest = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return digest.decode("utf-8")


def verify_password(password: str, password_digest: str) -> bool:
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"), password_digest.encode("utf-8"),
        )
    except ValueError:
        return False
