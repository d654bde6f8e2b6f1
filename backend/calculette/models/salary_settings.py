"""Global salary cost settings - versioned, exactly one active row."""
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from calculette.database import Base
from calculette.engine.types import GlobalCostParameters


class GlobalSalarySettings(Base):
    """Employer charges, indirect costs and billable hours used to cost salaried resources."""

    __tablename__ = "global_salary_settings"
    __table_args__ = (
        Index(
            "uq_global_salary_settings_active",
            "is_active",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    label: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employer_charges_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    indirect_annual_costs: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    billable_hours_per_year: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def cost_parameters(self) -> GlobalCostParameters:
        return GlobalCostParameters(
            employer_charges_rate_percent=self.employer_charges_rate,
            indirect_annual_costs=self.indirect_annual_costs,
            billable_hours_per_year=self.billable_hours_per_year,
        )
