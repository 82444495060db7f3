import logging
from contextlib import contextmanager

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from shortlinks import codec
from shortlinks.errors import StorageError
from shortlinks.models import AliasRecord, url_digest

logger = logging.getLogger("shortlinks.store")


class AliasStore:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._sessions = sessionmaker(
            bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
        )

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connection pool closed")

    @contextmanager
    def _session(self, operation: str):
        try:
            with self._sessions() as db:
                yield db
        except SQLAlchemyError as exc:
            logger.exception("Storage failure during %s", operation)
            raise StorageError() from exc

    @staticmethod
    def _by_long_url(db: Session, long_url: str) -> AliasRecord | None:
        return (
            db.query(AliasRecord)
            .filter_by(long_url_hash=url_digest(long_url), long_url=long_url)
            .first()
        )

    @staticmethod
    def _by_short_code(db: Session, code: str) -> AliasRecord | None:
        return db.query(AliasRecord).filter_by(short_code=code).first()

    def create(self, long_url: str) -> AliasRecord:
        with self._session("create") as db:
            existing = self._by_long_url(db, long_url)
            if existing:
                return existing

            link = AliasRecord(
                long_url=long_url,
                long_url_hash=url_digest(long_url),
                short_code=codec.pending_code(),
            )
            db.add(link)
            try:
                db.flush()
                link.short_code = codec.encode(link.id)
                db.commit()
            except IntegrityError:
                db.rollback()
                winner = self._by_long_url(db, long_url)
                if winner is None:
                    raise
                logger.info("Concurrent submission of %s resolved to %s", long_url, winner.short_code)
                return winner

            db.refresh(link)
            logger.info("Created alias %s (id=%s) for %s", link.short_code, link.id, long_url)
            return link

    def find_by_short_code(self, code: str) -> AliasRecord | None:
        with self._session("find_by_short_code") as db:
            return self._by_short_code(db, code)

    def find_by_long_url(self, long_url: str) -> AliasRecord | None:
        with self._session("find_by_long_url") as db:
            return self._by_long_url(db, long_url)

    def increment_click(self, code: str) -> AliasRecord | None:
        with self._session("increment_click") as db:
            # single UPDATE so concurrent clicks are never lost
            matched = (
                db.query(AliasRecord)
                .filter_by(short_code=code)
                .update(
                    {
                        AliasRecord.click_count: AliasRecord.click_count + 1,
                        AliasRecord.updated_at: func.now(),
                    },
                    synchronize_session=False,
                )
            )
            if not matched:
                db.rollback()
                return None
            link = self._by_short_code(db, code)
            db.commit()
            return link

    def delete(self, code: str) -> AliasRecord | None:
        with self._session("delete") as db:
            link = self._by_short_code(db, code)
            if not link:
                return None
            db.delete(link)
            db.commit()
            logger.info("Deleted alias %s", code)
            return link

    def count(self) -> int:
        with self._session("count") as db:
            return db.query(AliasRecord).count()

    def health_check(self) -> dict:
        try:
            with self.engine.connect() as conn:
                now = conn.execute(select(func.now())).scalar()
        except SQLAlchemyError:
            logger.exception("Database health check failed")
            return {"status": "unhealthy"}
        return {"status": "healthy", "timestamp": now}

    def list(self, limit: int = 10, offset: int = 0) -> tuple[list[AliasRecord], int]:
        # same-instant rows: highest id first
        with self._session("list") as db:
            items = (
                db.query(AliasRecord)
                .order_by(AliasRecord.created_at.desc(), AliasRecord.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            total = db.query(AliasRecord).count()
            return items, total
