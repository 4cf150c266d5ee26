"""Domain store: idempotent upserts, filtered reads and lifecycle deletes."""

from contextlib import contextmanager
from datetime import UTC, date, datetime
from typing import Dict, Iterable, Iterator, List, Optional

import structlog
from sqlalchemy import create_engine, delete, func, or_, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from dropwatch_common import DomainStatus, StoreError, constants
from dropwatch_schemas import DomainPage, DomainQuery, DomainRecord, DomainStats
from dropwatch_store.models import Base, DomainRow

logger = structlog.get_logger()

# Columns rewritten when an existing row is upserted again
_UPSERT_COLUMNS = (
    "tld",
    "expiry_date",
    "drop_date",
    "days_until_drop",
    "status",
    "registrar",
    "popularity_score",
    "category",
    "slug",
    "title",
    "score_metadata",
    "last_updated",
)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_record(row: DomainRow) -> DomainRecord:
    return DomainRecord(
        domain_name=row.domain_name,
        tld=row.tld,
        expiry_date=row.expiry_date,
        drop_date=row.drop_date,
        days_until_drop=row.days_until_drop,
        status=DomainStatus(row.status),
        registrar=row.registrar,
        popularity_score=row.popularity_score,
        category=row.category,
        slug=row.slug,
        title=row.title or "",
        metadata=row.score_metadata or {},
        last_updated=_as_utc(row.last_updated),
        created_at=_as_utc(row.created_at),
    )


class DomainStore:
    """
    Repository over the domains table.

    Works with SQLite (development, tests) and PostgreSQL. Every public
    method runs in its own transaction, so a failed write never leaves a
    partial record behind.
    """

    def __init__(
        self,
        database_url: str = constants.DEFAULT_DATABASE_URL,
        engine: Optional[Engine] = None,
    ):
        """
        Initialize the store.

        Args:
            database_url: SQLAlchemy URL (ignored when engine is given)
            engine: Pre-built engine, mainly for tests
        """
        if engine is None:
            connect_args = {}
            if database_url.startswith("sqlite"):
                connect_args["check_same_thread"] = False
            engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)

        self.engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        logger.info(
            "Domain store initialized",
            dialect=engine.dialect.name,
            database=engine.url.render_as_string(hide_password=True),
        )

    def init_schema(self) -> None:
        """Create tables if they do not exist yet."""
        Base.metadata.create_all(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session_scope(self, operation: str) -> Iterator[Session]:
        """Single transaction; commits on success, rolls back and wraps on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError(
                f"Store {operation} failed",
                context={"operation": operation},
                original_error=e,
            ) from e
        finally:
            session.close()

    def _insert(self):
        dialect = self.engine.dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise StoreError(
                "Upsert is not supported for this database",
                context={"dialect": dialect},
            )
        return insert(DomainRow.__table__)

    # ==================== Writes ====================

    def upsert(self, record: DomainRecord) -> None:
        """
        Insert or update a record keyed by domain_name.

        Re-running with the same record leaves a single row; created_at is
        kept from the first insert.
        """
        values = {
            "domain_name": record.domain_name,
            "tld": record.tld,
            "expiry_date": record.expiry_date,
            "drop_date": record.drop_date,
            "days_until_drop": record.days_until_drop,
            "status": record.status.value,
            "registrar": record.registrar,
            "popularity_score": record.popularity_score,
            "category": record.category,
            "slug": record.slug,
            "title": record.title,
            "score_metadata": record.metadata,
            "last_updated": record.last_updated,
            "created_at": record.created_at or record.last_updated,
        }

        stmt = self._insert().values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["domain_name"],
            set_={column: stmt.excluded[column] for column in _UPSERT_COLUMNS},
        )

        with self._session_scope("upsert") as session:
            session.execute(stmt)

        logger.debug(
            "Domain upserted",
            domain=record.domain_name,
            status=record.status.value,
            score=record.popularity_score,
        )

    def update_lifecycle(
        self,
        domain_name: str,
        status: DomainStatus,
        days_until_drop: int,
        now: datetime,
    ) -> None:
        """Rewrite the derived lifecycle fields of one record."""
        with self._session_scope("update") as session:
            session.execute(
                update(DomainRow)
                .where(DomainRow.domain_name == domain_name)
                .values(
                    status=status.value,
                    days_until_drop=days_until_drop,
                    last_updated=now,
                )
            )

    def delete_dropped_before(self, cutoff: date) -> int:
        """Delete dropped records whose drop_date is before cutoff."""
        with self._session_scope("delete") as session:
            result = session.execute(
                delete(DomainRow).where(
                    DomainRow.status == DomainStatus.DROPPED.value,
                    DomainRow.drop_date < cutoff,
                )
            )
            return result.rowcount or 0

    def delete_by_status(self, statuses: Iterable[DomainStatus]) -> int:
        values = [status.value for status in statuses]
        if not values:
            return 0
        with self._session_scope("delete") as session:
            result = session.execute(delete(DomainRow).where(DomainRow.status.in_(values)))
            return result.rowcount or 0

    def delete_pending_outside_window(self, min_days: int, max_days: int) -> int:
        """Delete pending_delete records whose days_until_drop is outside [min_days, max_days]."""
        with self._session_scope("delete") as session:
            result = session.execute(
                delete(DomainRow).where(
                    DomainRow.status == DomainStatus.PENDING_DELETE.value,
                    or_(
                        DomainRow.days_until_drop < min_days,
                        DomainRow.days_until_drop > max_days,
                    ),
                )
            )
            return result.rowcount or 0

    # ==================== Reads ====================

    def get(self, domain_name: str) -> Optional[DomainRecord]:
        with self._session_scope("query") as session:
            row = session.scalars(
                select(DomainRow).where(DomainRow.domain_name == domain_name.lower())
            ).first()
            return _to_record(row) if row else None

    def get_by_slug(self, slug: str) -> Optional[DomainRecord]:
        with self._session_scope("query") as session:
            row = session.scalars(select(DomainRow).where(DomainRow.slug == slug.lower())).first()
            return _to_record(row) if row else None

    def list_not_dropped(self) -> List[DomainRecord]:
        """Every record whose status can still change."""
        with self._session_scope("query") as session:
            rows = session.scalars(
                select(DomainRow)
                .where(DomainRow.status != DomainStatus.DROPPED.value)
                .order_by(DomainRow.domain_name)
            ).all()
            return [_to_record(row) for row in rows]

    def count(self, status: Optional[DomainStatus] = None) -> int:
        stmt = select(func.count()).select_from(DomainRow)
        if status is not None:
            stmt = stmt.where(DomainRow.status == status.value)
        with self._session_scope("query") as session:
            return session.scalar(stmt) or 0

    def status_counts(self) -> Dict[str, int]:
        """Number of records per lifecycle status (every status present, zero if empty)."""
        counts = {status.value: 0 for status in DomainStatus}
        with self._session_scope("query") as session:
            rows = session.execute(
                select(DomainRow.status, func.count()).group_by(DomainRow.status)
            ).all()
        for status, total in rows:
            counts[status] = total
        return counts

    def _filtered(self, stmt, query: DomainQuery):
        if query.status is not None:
            stmt = stmt.where(DomainRow.status == query.status.value)
        if query.tld:
            stmt = stmt.where(DomainRow.tld == query.tld)
        if query.category:
            stmt = stmt.where(DomainRow.category == query.category)
        if query.min_score is not None:
            stmt = stmt.where(DomainRow.popularity_score >= query.min_score)
        if query.max_score is not None:
            stmt = stmt.where(DomainRow.popularity_score <= query.max_score)
        if query.days_min is not None:
            stmt = stmt.where(DomainRow.days_until_drop >= query.days_min)
        if query.days_max is not None:
            stmt = stmt.where(DomainRow.days_until_drop <= query.days_max)
        if query.search:
            stmt = stmt.where(DomainRow.domain_name.ilike(f"%{query.search}%"))
        return stmt

    def query(self, query: DomainQuery) -> DomainPage:
        """
        Filtered, sorted and paginated listing.

        Args:
            query: Filters and paging

        Returns:
            DomainPage with the total matching count and a has_more flag
        """
        sort_column = getattr(DomainRow, query.sort)
        ordering = sort_column.desc() if query.order == "desc" else sort_column.asc()

        stmt = (
            self._filtered(select(DomainRow), query)
            .order_by(ordering, DomainRow.domain_name.asc())
            .limit(query.limit)
            .offset(query.offset)
        )
        count_stmt = self._filtered(select(func.count()).select_from(DomainRow), query)

        with self._session_scope("query") as session:
            rows = session.scalars(stmt).all()
            total = session.scalar(count_stmt) or 0
            domains = [_to_record(row) for row in rows]

        return DomainPage(
            domains=domains,
            count=total,
            limit=query.limit,
            offset=query.offset,
            has_more=query.offset + len(domains) < total,
        )

    def stats(
        self,
        now: datetime,
        window_min_days: int = constants.DEFAULT_WINDOW_MIN_DAYS,
        window_max_days: int = constants.DEFAULT_WINDOW_MAX_DAYS,
    ) -> DomainStats:
        """Headline counts for pending_delete records inside the drop window."""
        in_window = (
            DomainRow.status == DomainStatus.PENDING_DELETE.value,
            DomainRow.days_until_drop >= window_min_days,
            DomainRow.days_until_drop <= window_max_days,
        )

        with self._session_scope("query") as session:
            total_pending = session.scalar(
                select(func.count()).select_from(DomainRow).where(*in_window)
            )
            hot_domains = session.scalar(
                select(func.count())
                .select_from(DomainRow)
                .where(*in_window, DomainRow.popularity_score >= constants.HOT_DOMAIN_SCORE)
            )
            this_week = session.scalar(
                select(func.count())
                .select_from(DomainRow)
                .where(
                    DomainRow.status == DomainStatus.PENDING_DELETE.value,
                    DomainRow.days_until_drop >= 0,
                    DomainRow.days_until_drop <= constants.WEEK_WINDOW_DAYS,
                )
            )
            by_tld = session.execute(
                select(DomainRow.tld, func.count())
                .where(*in_window)
                .group_by(DomainRow.tld)
            ).all()

        return DomainStats(
            total_pending=total_pending or 0,
            hot_domains=hot_domains or 0,
            dropping_this_week=this_week or 0,
            by_tld={tld: total for tld, total in by_tld},
            last_updated=now,
        )
