"""Client presentation and commercial configuration helpers."""
from dataclasses import replace

from calculette.engine.types import ClientCommercialConfig
from calculette.models.client import Client
from calculette.schemas.client import ClientResponse

FIELD_LABELS = {
    "target_margin_percent": "target margin",
    "minimum_margin_percent": "minimum margin",
    "discount_percent": "discount",
    "forced_vacation_days_per_year": "forced vacation days",
    "target_hourly_rate": "target hourly rate",
}


def financial_status_message(missing_fields: list[str]) -> str:
    if not missing_fields:
        return "Financial configuration complete"
    labels = ", ".join(FIELD_LABELS.get(f, f) for f in missing_fields)
    return f"Incomplete financial configuration, to be completed by the CFO: {labels}"


def client_to_response(client: Client, include_financials: bool) -> ClientResponse:
    """Completeness is always reported; the values themselves only to financial roles."""
    missing = client.commercial_config().missing_fields()
    data = {
        "id": client.id,
        "code": client.code,
        "name": client.name,
        "business_unit_code": client.business_unit_code,
        "contact_name": client.contact_name,
        "contact_email": client.contact_email,
        "is_active": client.is_active,
        "is_financial_config_complete": not missing,
        "missing_financial_fields": missing,
        "financial_config_status_message": financial_status_message(missing),
        "created_at": client.created_at,
        "updated_at": client.updated_at,
    }
    if include_financials:
        data.update(
            target_margin_percent=client.target_margin_percent,
            minimum_margin_percent=client.minimum_margin_percent,
            discount_percent=client.discount_percent,
            forced_vacation_days_per_year=client.forced_vacation_days_per_year,
            target_hourly_rate=client.target_hourly_rate,
        )
    return ClientResponse(**data)


def merge_commercial_config(client: Client, values: dict) -> ClientCommercialConfig:
    """Client's current config with `values` laid over it."""
    return replace(client.commercial_config(), **values)


def threshold_error(config: ClientCommercialConfig) -> str | None:
    if (
        config.minimum_margin_percent is not None
        and config.target_margin_percent is not None
        and config.minimum_margin_percent > config.target_margin_percent
    ):
        return "minimum_margin_percent must not exceed target_margin_percent"
    return None


def apply_commercial_config(client: Client, config: ClientCommercialConfig) -> None:
    client.target_margin_percent = config.target_margin_percent
    client.minimum_margin_percent = config.minimum_margin_percent
    client.discount_percent = config.discount_percent
    client.forced_vacation_days_per_year = config.forced_vacation_days_per_year
    client.target_hourly_rate = config.target_hourly_rate
