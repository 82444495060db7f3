import hashlib

from sqlalchemy import Column, DateTime, Integer, String, func

from shortlinks.database import Base


def url_digest(long_url: str) -> str:
    return hashlib.sha256(long_url.encode("utf-8")).hexdigest()


class AliasRecord(Base):
    __tablename__ = "urls"

    id = Column(Integer, primary_key=True, index=True)
    short_code = Column(String(16), unique=True, index=True, nullable=False)
    long_url = Column(String(2048), nullable=False)
    # one alias per submitted URL; indexed by digest since btree rows are size-limited
    long_url_hash = Column(String(64), unique=True, index=True, nullable=False)
    click_count = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<AliasRecord id={self.id} short_code={self.short_code!r}>"
