import logging
from typing import Optional

from sqlmodel import Session, col, select

from ieee_quiz.models import KVRecord, UserRecord, dump, utcnow

logger = logging.getLogger(__name__)

USER_PREFIX = "user:"
TOKEN_PREFIX = "token:"
CONTACT_PREFIX = "contact:"


class RecordStore:
    """String-keyed JSON records. Callers must not rely on listing order."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str) -> Optional[dict]:
        record = self.session.get(KVRecord, key)
        return dict(record.value) if record else None

    def set(self, key: str, value: dict) -> None:
        record = self.session.get(KVRecord, key)
        if record:
            record.value = value
            record.updated_at = utcnow()
        else:
            record = KVRecord(key=key, value=value)
        self.session.add(record)
        self.session.commit()

    def get_by_prefix(self, prefix: str) -> list[dict]:
        records = self.session.exec(
            select(KVRecord).where(col(KVRecord.key).startswith(prefix))
        ).all()
        return [dict(r.value) for r in records]


class UserStore:
    def __init__(self, records: RecordStore):
        self.records = records

    def get(self, user_id: str) -> Optional[UserRecord]:
        data = self.records.get(f"{USER_PREFIX}{user_id}")
        if data is None:
            return None
        return UserRecord.model_validate(data)

    def set(self, user: UserRecord) -> None:
        self.records.set(f"{USER_PREFIX}{user.id}", dump(user))

    def list_all(self) -> list[UserRecord]:
        return [UserRecord.model_validate(d) for d in self.records.get_by_prefix(USER_PREFIX)]
