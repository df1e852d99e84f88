from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    MetaData,
    String,
    Table,
    delete,
    func,
    select,
    text,
    update,
)
from sqlalchemy.engine import Engine

from weather_dashboard.models.favorites import FAVORITES_PARTITION_KEY, FavoriteCity


def build_favorites_table(name: str, metadata: MetaData) -> Table:
    return Table(
        name,
        metadata,
        Column("partition_key", String(64), primary_key=True),
        Column("row_key", String(36), primary_key=True),
        Column("city_name", String(100), nullable=False),
        Column("country", String(2), nullable=False),
        Column("latitude", Float, nullable=False),
        Column("longitude", Float, nullable=False),
        Column("date_added", DateTime(timezone=True), nullable=False),
        Column("last_accessed", DateTime(timezone=True), nullable=False),
    )


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class SqlFavoriteCityRepository:
    """Favorites table keyed by (partition_key, row_key); one partition for all rows."""

    def __init__(
        self,
        *,
        engine: Engine,
        table_name: str,
        partition_key: str = FAVORITES_PARTITION_KEY,
    ) -> None:
        self._engine = engine
        self._partition_key = partition_key
        self._metadata = MetaData()
        self._table = build_favorites_table(table_name, self._metadata)

    def ensure_ready(self) -> None:
        self._metadata.create_all(self._engine, checkfirst=True)

    def ping(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def list(self) -> list[FavoriteCity]:
        t = self._table
        stmt = (
            select(t)
            .where(t.c.partition_key == self._partition_key)
            .order_by(t.c.city_name, t.c.country)
        )
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [self._to_favorite(row) for row in rows]

    def get_by_id(self, favorite_id: str) -> FavoriteCity | None:
        t = self._table
        stmt = select(t).where(
            t.c.partition_key == self._partition_key, t.c.row_key == favorite_id
        )
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return self._to_favorite(row)

    def add(self, favorite: FavoriteCity) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                self._table.insert().values(
                    partition_key=self._partition_key,
                    row_key=favorite.id,
                    city_name=favorite.city_name,
                    country=favorite.country,
                    latitude=float(favorite.latitude),
                    longitude=float(favorite.longitude),
                    date_added=_as_utc(favorite.date_added),
                    last_accessed=_as_utc(favorite.last_accessed),
                )
            )

    def delete(self, favorite_id: str) -> bool:
        t = self._table
        stmt = delete(t).where(
            t.c.partition_key == self._partition_key, t.c.row_key == favorite_id
        )
        with self._engine.begin() as conn:
            return conn.execute(stmt).rowcount > 0

    def touch_last_accessed(self, favorite_id: str, *, at: datetime) -> bool:
        t = self._table
        stmt = (
            update(t)
            .where(t.c.partition_key == self._partition_key, t.c.row_key == favorite_id)
            .values(last_accessed=_as_utc(at))
        )
        with self._engine.begin() as conn:
            return conn.execute(stmt).rowcount > 0

    def exists_by_city_country(self, *, city_name: str, country: str) -> bool:
        t = self._table
        stmt = (
            select(t.c.row_key)
            .where(
                t.c.partition_key == self._partition_key,
                t.c.city_name == city_name,
                t.c.country == country,
            )
            .limit(1)
        )
        with self._engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def count(self) -> int:
        t = self._table
        stmt = select(func.count()).select_from(t).where(t.c.partition_key == self._partition_key)
        with self._engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())

    @staticmethod
    def _to_favorite(row: Any) -> FavoriteCity:
        return FavoriteCity(
            id=row["row_key"],
            partition_key=row["partition_key"],
            city_name=row["city_name"],
            country=row["country"],
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            date_added=_as_utc(row["date_added"]),
            last_accessed=_as_utc(row["last_accessed"]),
        )
