"""
Relational storage for topics, daily articles and social submissions (SQLAlchemy Core).

The natural keys are enforced by the database itself, so concurrent writers
racing on the same ``(date, topic_id, language)`` or ``source_url`` get a
``ConflictError`` rather than a duplicate row.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Type

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    delete,
    event,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from dailynews.errors import ConflictError, NotFoundError, ValidationError
from dailynews.models import Article, SocialArticle, SocialInterest, Topic

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


metadata = MetaData()

topics_table = Table(
    "topics",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, nullable=False, default=_utcnow),
)

articles_table = Table(
    "articles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("date", Date, nullable=False),
    Column("topic_id", Integer, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False),
    Column("language", String(8), nullable=False, default="en"),
    Column("headline", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("sources", Text, nullable=True),
    Column("voice_file_path", Text, nullable=True),
    Column("created_at", DateTime, nullable=False, default=_utcnow),
    UniqueConstraint("date", "topic_id", "language", name="uq_articles_date_topic_language"),
)

social_interests_table = Table(
    "social_interests",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, nullable=False, default=_utcnow),
)

social_articles_table = Table(
    "social_articles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("interest_id", Integer, ForeignKey("social_interests.id", ondelete="CASCADE"), nullable=False),
    Column("source_url", Text, nullable=False, unique=True),
    Column("title", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("summary", Text, nullable=True),
    Column("author", Text, nullable=True),
    Column("publish_date", Date, nullable=True),
    Column("scraped_at", Date, nullable=False),
    Column("created_at", DateTime, nullable=False, default=_utcnow),
)

Index("idx_social_articles_scraped_at", social_articles_table.c.scraped_at)
Index("idx_social_articles_interest_id", social_articles_table.c.interest_id)

# Only fields produced after insertion may be written through update_derived_field.
DERIVED_FIELDS = {
    "article": (articles_table, "voice_file_path"),
    "social_article": (social_articles_table, "summary"),
}


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    text = str(getattr(exc, "orig", exc)).lower()
    return "foreign key" in text


def _language_code(language) -> str:
    return getattr(language, "value", language)


class Store:
    def __init__(self, database_url: str = "sqlite:///daily_info.db", engine: Optional[Engine] = None) -> None:
        if engine is None:
            kwargs: dict = {"future": True}
            if database_url.startswith("sqlite"):
                kwargs["connect_args"] = {"check_same_thread": False}
            engine = create_engine(database_url, **kwargs)
        self.engine = engine
        if self.engine.dialect.name == "sqlite":
            database = self.engine.url.database
            if database and database != ":memory:":
                Path(database).parent.mkdir(parents=True, exist_ok=True)
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

    def init_schema(self) -> None:
        metadata.create_all(self.engine)

    def seed_default_topics(self, names: Iterable[str]) -> int:
        """Insert any missing default topics; returns how many were added."""
        added = 0
        for name in names:
            with self.engine.connect() as conn:
                exists = conn.execute(select(topics_table.c.id).where(topics_table.c.name == name)).first()
            if exists:
                continue
            try:
                with self.engine.begin() as conn:
                    conn.execute(insert(topics_table).values(name=name, is_active=True))
                added += 1
            except IntegrityError:
                logger.debug("Default topic %s inserted concurrently", name)
        if added:
            logger.info("Seeded %s default topics", added)
        return added

    # -- topics / interests -------------------------------------------------

    def list_topics(self) -> List[Topic]:
        return self._list_named(topics_table, Topic, active_only=False)

    def get_active_topics(self) -> List[Topic]:
        return self._list_named(topics_table, Topic, active_only=True)

    def get_topic(self, topic_id: int) -> Optional[Topic]:
        return self._get_named(topics_table, Topic, topic_id)

    def add_topic(self, name: str) -> Topic:
        return self._add_named(topics_table, Topic, name, "Topic")

    def update_topic(self, topic_id: int, name: Optional[str] = None, is_active: Optional[bool] = None) -> Topic:
        return self._update_named(topics_table, Topic, topic_id, name, is_active, "Topic")

    def delete_topic(self, topic_id: int) -> None:
        self._delete_by_id(topics_table, topic_id, "Topic")

    def list_interests(self) -> List[SocialInterest]:
        return self._list_named(social_interests_table, SocialInterest, active_only=False)

    def get_interest(self, interest_id: int) -> Optional[SocialInterest]:
        return self._get_named(social_interests_table, SocialInterest, interest_id)

    def add_interest(self, name: str) -> SocialInterest:
        return self._add_named(social_interests_table, SocialInterest, name, "Interest")

    def update_interest(
        self, interest_id: int, name: Optional[str] = None, is_active: Optional[bool] = None
    ) -> SocialInterest:
        return self._update_named(social_interests_table, SocialInterest, interest_id, name, is_active, "Interest")

    def delete_interest(self, interest_id: int) -> None:
        self._delete_by_id(social_interests_table, interest_id, "Interest")

    # -- daily articles -----------------------------------------------------

    def article_exists(self, run_date: date, topic_id: int, language: str) -> bool:
        stmt = select(articles_table.c.id).where(
            articles_table.c.date == run_date,
            articles_table.c.topic_id == topic_id,
            articles_table.c.language == _language_code(language),
        )
        with self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def insert_article(
        self,
        run_date: date,
        topic_id: int,
        language: str,
        headline: str,
        content: str,
        sources: Sequence[str] = (),
    ) -> int:
        values = dict(
            date=run_date,
            topic_id=topic_id,
            language=_language_code(language),
            headline=headline,
            content=content,
            sources=json.dumps(list(sources)),
            voice_file_path=None,
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(insert(articles_table).values(**values))
                return int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            if _is_foreign_key_violation(exc):
                raise ValidationError(f"Topic {topic_id} does not exist") from exc
            raise ConflictError(f"Article already exists for {run_date} / topic {topic_id} / {language}") from exc

    def get_article(self, article_id: int) -> Optional[Article]:
        stmt = self._article_select().where(articles_table.c.id == article_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return _row_to_article(row) if row else None

    def list_article_dates(self) -> List[date]:
        stmt = select(articles_table.c.date).distinct().order_by(articles_table.c.date.desc())
        with self.engine.connect() as conn:
            return [row[0] for row in conn.execute(stmt)]

    def get_articles_by_date(self, run_date: date) -> List[Article]:
        stmt = (
            self._article_select()
            .where(articles_table.c.date == run_date)
            .order_by(topics_table.c.name, articles_table.c.language)
        )
        with self.engine.connect() as conn:
            return [_row_to_article(row) for row in conn.execute(stmt).mappings()]

    def delete_articles_by_date(self, run_date: date) -> int:
        with self.engine.begin() as conn:
            return conn.execute(delete(articles_table).where(articles_table.c.date == run_date)).rowcount

    def set_article_audio_path(self, article_id: int, path: str) -> Article:
        return self.update_derived_field("article", article_id, "voice_file_path", path)

    def count_articles(self) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(articles_table)).scalar_one())

    # -- social articles ----------------------------------------------------

    def social_article_exists(self, source_url: str) -> bool:
        return self.get_social_article_by_url(source_url) is not None

    def get_social_article_by_url(self, source_url: str) -> Optional[SocialArticle]:
        stmt = self._social_select().where(social_articles_table.c.source_url == source_url)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return _row_to_social(row) if row else None

    def insert_social_article(
        self,
        interest_id: int,
        source_url: str,
        title: str,
        content: str,
        scraped_at: date,
        author: Optional[str] = None,
        publish_date: Optional[date] = None,
    ) -> int:
        values = dict(
            interest_id=interest_id,
            source_url=source_url,
            title=title,
            content=content,
            author=author,
            publish_date=publish_date,
            scraped_at=scraped_at,
            summary=None,
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(insert(social_articles_table).values(**values))
                return int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            if _is_foreign_key_violation(exc):
                raise ValidationError(f"Interest {interest_id} does not exist") from exc
            raise ConflictError(f"URL already submitted: {source_url}") from exc

    def get_social_article(self, article_id: int) -> Optional[SocialArticle]:
        stmt = self._social_select().where(social_articles_table.c.id == article_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return _row_to_social(row) if row else None

    def list_social_dates(self) -> List[date]:
        stmt = select(social_articles_table.c.scraped_at).distinct().order_by(social_articles_table.c.scraped_at.desc())
        with self.engine.connect() as conn:
            return [row[0] for row in conn.execute(stmt)]

    def get_social_articles_by_date(self, scraped_at: date) -> List[SocialArticle]:
        stmt = (
            self._social_select()
            .where(social_articles_table.c.scraped_at == scraped_at)
            .order_by(social_articles_table.c.created_at.desc(), social_articles_table.c.id.desc())
        )
        with self.engine.connect() as conn:
            return [_row_to_social(row) for row in conn.execute(stmt).mappings()]

    def set_social_article_summary(self, article_id: int, summary: str) -> SocialArticle:
        return self.update_derived_field("social_article", article_id, "summary", summary)

    def delete_social_article(self, article_id: int) -> None:
        self._delete_by_id(social_articles_table, article_id, "Social article")

    # -- derived fields -----------------------------------------------------

    def update_derived_field(self, entity: str, entity_id: int, field: str, value: Any):
        """
        Write one post-insert field (``voice_file_path`` or ``summary``).

        Every other column is immutable once the row exists.
        """
        allowed = DERIVED_FIELDS.get(entity)
        if allowed is None or allowed[1] != field:
            raise ValidationError(f"Field '{field}' of '{entity}' cannot be updated")
        table = allowed[0]
        with self.engine.begin() as conn:
            result = conn.execute(update(table).where(table.c.id == entity_id).values({field: value}))
        if result.rowcount == 0:
            raise NotFoundError(f"{entity.replace('_', ' ').capitalize()} {entity_id} not found")
        if entity == "article":
            return self.get_article(entity_id)
        return self.get_social_article(entity_id)

    # -- helpers ------------------------------------------------------------

    def _list_named(self, table: Table, model: Type[Topic], active_only: bool) -> List[Topic]:
        stmt = select(table).order_by(table.c.created_at.asc(), table.c.id.asc())
        if active_only:
            stmt = stmt.where(table.c.is_active.is_(True))
        with self.engine.connect() as conn:
            return [_row_to_named(model, row) for row in conn.execute(stmt).mappings()]

    def _get_named(self, table: Table, model: Type[Topic], entity_id: int) -> Optional[Topic]:
        with self.engine.connect() as conn:
            row = conn.execute(select(table).where(table.c.id == entity_id)).mappings().first()
        return _row_to_named(model, row) if row else None

    def _add_named(self, table: Table, model: Type[Topic], name: str, label: str) -> Topic:
        name = (name or "").strip()
        if not name:
            raise ValidationError(f"{label} name is required")
        try:
            with self.engine.begin() as conn:
                result = conn.execute(insert(table).values(name=name, is_active=True))
                new_id = int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            raise ConflictError(f"{label} '{name}' already exists") from exc
        return self._get_named(table, model, new_id)

    def _update_named(
        self,
        table: Table,
        model: Type[Topic],
        entity_id: int,
        name: Optional[str],
        is_active: Optional[bool],
        label: str,
    ) -> Topic:
        values: dict = {}
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError(f"{label} name cannot be empty")
            values["name"] = name
        if is_active is not None:
            values["is_active"] = bool(is_active)
        if self._get_named(table, model, entity_id) is None:
            raise NotFoundError(f"{label} {entity_id} not found")
        if values:
            try:
                with self.engine.begin() as conn:
                    conn.execute(update(table).where(table.c.id == entity_id).values(**values))
            except IntegrityError as exc:
                raise ConflictError(f"{label} '{name}' already exists") from exc
        return self._get_named(table, model, entity_id)

    def _delete_by_id(self, table: Table, entity_id: int, label: str) -> None:
        with self.engine.begin() as conn:
            result = conn.execute(delete(table).where(table.c.id == entity_id))
        if result.rowcount == 0:
            raise NotFoundError(f"{label} {entity_id} not found")

    @staticmethod
    def _article_select():
        return select(articles_table, topics_table.c.name.label("topic_name")).join(
            topics_table, articles_table.c.topic_id == topics_table.c.id
        )

    @staticmethod
    def _social_select():
        return select(social_articles_table, social_interests_table.c.name.label("interest_name")).join(
            social_interests_table, social_articles_table.c.interest_id == social_interests_table.c.id
        )


def _row_to_named(model: Type[Topic], row) -> Topic:
    return model(id=row["id"], name=row["name"], is_active=bool(row["is_active"]), created_at=row["created_at"])


def _row_to_article(row) -> Article:
    try:
        sources = json.loads(row["sources"]) if row["sources"] else []
    except (TypeError, ValueError):
        sources = []
    return Article(
        id=row["id"],
        date=row["date"],
        topic_id=row["topic_id"],
        language=row["language"],
        headline=row["headline"],
        content=row["content"],
        sources=sources,
        voice_file_path=row["voice_file_path"],
        created_at=row["created_at"],
        topic_name=row["topic_name"],
    )


def _row_to_social(row) -> SocialArticle:
    return SocialArticle(
        id=row["id"],
        interest_id=row["interest_id"],
        source_url=row["source_url"],
        title=row["title"],
        content=row["content"],
        scraped_at=row["scraped_at"],
        summary=row["summary"],
        author=row["author"],
        publish_date=row["publish_date"],
        created_at=row["created_at"],
        interest_name=row["interest_name"],
    )
