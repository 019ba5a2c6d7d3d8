from datetime import datetime

from .extensions import db


class BlobEntry(db.Model):
    """
    One named JSON blob. The whole key-value store the app persists to.
    """
    __tablename__ = "blob_entries"

    key = db.Column(db.String(128), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @classmethod
    def read(cls, key: str):
        entry = db.session.get(cls, key)
        return entry.value if entry else None

    @classmethod
    def write(cls, key: str, value: str) -> None:
        entry = db.session.get(cls, key)
        if not entry:
            entry = cls(key=key, value=value)
            db.session.add(entry)
        else:
            entry.value = value
            entry.updated_at = datetime.utcnow()
        db.session.commit()
