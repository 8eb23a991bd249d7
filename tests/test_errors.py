from sqlalchemy.exc import IntegrityError

from backend.errors import CHECK_VIOLATION, UNIQUE_VIOLATION, is_check_violation, is_unique_violation, sqlstate_of


class PostgresError(Exception):
    def __init__(self, message, sqlstate=None, pgcode=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.pgcode = pgcode


def _integrity(orig):
    return IntegrityError("INSERT INTO things VALUES (1)", {}, orig)


def test_sqlstate_from_driver_attributes():
    assert sqlstate_of(_integrity(PostgresError("dup", sqlstate="23505"))) == UNIQUE_VIOLATION
    assert sqlstate_of(_integrity(PostgresError("bad", pgcode="23514"))) == CHECK_VIOLATION


def test_sqlstate_from_sqlite_messages():
    unique = _integrity(Exception("UNIQUE constraint failed: mood_entries.user_id, mood_entries.date"))
    check = _integrity(Exception("CHECK constraint failed: width BETWEEN 1 AND 4"))
    assert is_unique_violation(unique)
    assert not is_check_violation(unique)
    assert is_check_violation(check)


def test_unrelated_errors():
    assert sqlstate_of(_integrity(Exception("disk I/O error"))) is None
    assert not is_unique_violation(ValueError("UNIQUE constraint failed"))
