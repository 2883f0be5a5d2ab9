from fastapi import Header
from gradebook.core.database import SessionLocal, get_db

def get_transactional_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_student_id(x_student_id: int = Header(..., alias="X-Student-Id", gt=0)) -> int:
    """Caller identity. Authentication happens upstream; this service trusts the header."""
    return x_student_id
