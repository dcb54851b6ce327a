from app.extensions import db

class KvEntry(db.Model):
    """One JSON document per key; the whole app state lives in this table."""
    __tablename__ = "kv_store"

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.JSON, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), server_default=db.func.now(), nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<KvEntry {self.key!r}>"
