import bcrypt

# bcrypt ignores everything past 72 bytes
_MAX_PASSWORD_BYTES = 72


def _to_bytes(password: str | bytes) -> bytes:
    if isinstance(password, bytes):
        return password[:_MAX_PASSWORD_BYTES]
    return password.encode('utf-8')[:_MAX_PASSWORD_BYTES]


def hash_password(password: str | bytes) -> str:
    """
    Hash an account password with a fresh bcrypt salt.
    """
    return bcrypt.hashpw(_to_bytes(password), bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Check a login attempt against the stored hash. Accounts without a hash never match.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(plain_password), hashed_password.encode('utf-8'))
    except ValueError:
        return False
