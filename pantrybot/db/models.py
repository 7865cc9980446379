"""
ORM entities.

Every row is guild-scoped through ``guild_id`` and carries a short random
identifier plus a creation timestamp. Name uniqueness is enforced by unique
indexes rather than by read-before-write checks.
"""

import secrets
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

ID_ALPHABET = "123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
ID_LENGTH = 15

Base = declarative_base()


def generate_id(length: int = ID_LENGTH) -> str:
    """Return a random identifier drawn from ``ID_ALPHABET``."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FoodCategory(Base):
    __tablename__ = "food_category"
    __table_args__ = (
        UniqueConstraint("guild_id", "name", name="uq_food_category_guild_name"),
    )

    id = Column(String(ID_LENGTH), primary_key=True, default=generate_id)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    guild_id = Column(String(32), nullable=False, index=True)

    foods = relationship(
        "Food",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Food.name",
    )

    def __repr__(self) -> str:
        return f"<FoodCategory {self.id} {self.name!r} guild={self.guild_id}>"


class Food(Base):
    __tablename__ = "food"
    __table_args__ = (
        UniqueConstraint("guild_id", "category_id", "name", name="uq_food_guild_category_name"),
    )

    id = Column(String(ID_LENGTH), primary_key=True, default=generate_id)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(255), nullable=True)  # path relative to the upload root
    category_id = Column(
        String(ID_LENGTH),
        ForeignKey("food_category.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guild_id = Column(String(32), nullable=False, index=True)
    user_id = Column(String(32), nullable=True)

    category = relationship("FoodCategory", back_populates="foods", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Food {self.id} {self.name!r} guild={self.guild_id}>"


class Bank(Base):
    """A member's saved bank account, referencing an entry of the bank directory."""

    __tablename__ = "bank"
    __table_args__ = (
        UniqueConstraint(
            "guild_id", "user_id", "short_name", "account_number",
            name="uq_bank_guild_user_account",
        ),
    )

    id = Column(String(ID_LENGTH), primary_key=True, default=generate_id)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    name = Column(String(255), nullable=False)
    short_name = Column(String(255), nullable=False)  # falls back to name; part of the unique key
    bin = Column(String(16), nullable=True)
    account_number = Column(String(32), nullable=False)
    account_name = Column(String(100), nullable=True)
    guild_id = Column(String(32), nullable=False, index=True)
    user_id = Column(String(32), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Bank {self.id} {self.short_name or self.name!r} user={self.user_id}>"
