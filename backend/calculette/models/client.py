"""Client entity with its commercial (margin) configuration."""
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from calculette.database import Base
from calculette.engine.types import ClientCommercialConfig


class Client(Base):
    """Client. The five commercial fields stay NULL until the CFO configures them."""

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    business_unit_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    target_margin_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    minimum_margin_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    discount_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    forced_vacation_days_per_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def commercial_config(self) -> ClientCommercialConfig:
        """Snapshot handed to the margin engine."""
        return ClientCommercialConfig(
            target_margin_percent=self.target_margin_percent,
            minimum_margin_percent=self.minimum_margin_percent,
            discount_percent=self.discount_percent,
            forced_vacation_days_per_year=self.forced_vacation_days_per_year,
            target_hourly_rate=self.target_hourly_rate,
        )
