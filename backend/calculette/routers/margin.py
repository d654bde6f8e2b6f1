"""Margin simulation ("calculette") and saved scenario routes."""
import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calculette.auth.deps import get_current_user, get_user_roles
from calculette.auth.rbac import can_run_simulation, can_view_financials, is_admin
from calculette.database import get_db
from calculette.engine.calculator import MarginEngine
from calculette.engine.exceptions import IncompleteClientConfigError, InvalidInputError
from calculette.engine.types import MarginSimulationResult, ResourceKind
from calculette.models.client import Client
from calculette.models.scenario import MarginScenario
from calculette.models.user import User
from calculette.schemas.margin import (
    MarginSimulationRequest,
    MarginSimulationResponse,
    ScenarioCreate,
    ScenarioResponse,
    ScenarioSummary,
)
from calculette.services.salary_settings_service import get_active_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/margin", tags=["margin"])


# Client commercial values, and figures the target rate can be derived from.
HIDDEN_TARGET_FIELDS = (
    "effective_target_bill_rate",
    "gross_target_bill_rate",
    "theoretical_margin_percent",
    "theoretical_margin_per_hour",
    "configured_target_margin_percent",
    "configured_minimum_margin_percent",
    "configured_discount_percent",
    "forced_vacation_days_per_year",
)
HIDDEN_PROPOSAL_FIELDS = (
    "discount_percent_applied",
    "margin_delta_vs_target",
    "premium_vs_target_per_hour",
)


def _result_response(result: MarginSimulationResult) -> MarginSimulationResponse:
    return MarginSimulationResponse.model_validate(asdict(result))


def _visible_to(response: MarginSimulationResponse, roles: list[str]) -> MarginSimulationResponse:
    """Statuses, cost and the proposal stay visible; client targets only to financial roles."""
    if can_view_financials(roles):
        return response
    return response.model_copy(update={
        "target_results": response.target_results.model_copy(
            update={name: None for name in HIDDEN_TARGET_FIELDS}
        ),
        "proposed_results": response.proposed_results.model_copy(
            update={name: None for name in HIDDEN_PROPOSAL_FIELDS}
        ),
    })


def _require_simulation_rights(roles: list[str]) -> None:
    if not can_run_simulation(roles):
        raise HTTPException(status_code=403, detail="Cannot run margin simulations")


async def _simulate(db: AsyncSession, data: MarginSimulationRequest) -> tuple[Client, MarginSimulationResult]:
    """Load the client and active settings snapshots, then run the engine."""
    client = await db.get(Client, data.client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    global_costs = None
    if data.resource_type == ResourceKind.SALARIED:
        active = await get_active_settings(db)
        if not active:
            raise HTTPException(
                status_code=409,
                detail="No active global salary settings. Ask the CFO to configure them before simulating a salaried resource.",
            )
        global_costs = active.cost_parameters()

    engine = MarginEngine()
    try:
        result = engine.simulate(
            data.cost_profile(),
            global_costs,
            client.commercial_config(),
            data.proposed_bill_rate,
            data.planned_hours,
        )
    except IncompleteClientConfigError as e:
        logger.warning("Simulation refused for client %s: missing %s", client.code, e.missing_fields)
        raise HTTPException(
            status_code=422,
            detail={"message": e.message, "missing_fields": e.missing_fields},
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail={"message": e.message, "field": e.field})

    logger.info(
        "Simulation for client %s (%s): cost/h=%s target=%s proposed=%s",
        client.code,
        data.resource_type.value,
        result.target_results.cost_per_hour,
        result.target_results.status.value,
        result.proposed_results.status.value,
    )
    return client, result


@router.post("/simulate", response_model=MarginSimulationResponse)
async def simulate_margin(
    data: MarginSimulationRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    _require_simulation_rights(roles)
    _, result = await _simulate(db, data)
    return _visible_to(_result_response(result), roles)


def _scenario_response(scenario: MarginScenario, roles: list[str]) -> ScenarioResponse:
    return ScenarioResponse(
        id=scenario.id,
        name=scenario.name,
        client_id=scenario.client_id,
        client_name=scenario.client_name,
        resource_kind=scenario.resource_kind,
        proposed_status=scenario.proposed_status,
        created_at=scenario.created_at,
        request=MarginSimulationRequest.model_validate(scenario.request_payload),
        result=_visible_to(MarginSimulationResponse.model_validate(scenario.result_payload), roles),
    )


async def _get_owned_scenario(
    db: AsyncSession,
    scenario_id: int,
    user: User,
    roles: list[str],
) -> MarginScenario:
    scenario = await db.get(MarginScenario, scenario_id)
    if not scenario or (scenario.created_by != user.id and not is_admin(roles)):
        raise HTTPException(status_code=404, detail="Scenario not found")
    return scenario


@router.post("/scenarios", response_model=ScenarioResponse, status_code=201)
async def save_scenario(
    data: ScenarioCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    """Re-run the simulation server-side and store request + result as a snapshot."""
    _require_simulation_rights(roles)
    client, result = await _simulate(db, data.request)
    response = _result_response(result)
    scenario = MarginScenario(
        name=data.name,
        client_id=client.id,
        client_name=client.name,
        resource_kind=data.request.resource_type.value,
        proposed_status=result.proposed_results.status.value,
        request_payload=data.request.model_dump(mode="json"),
        result_payload=response.model_dump(mode="json"),
        created_by=user.id,
    )
    db.add(scenario)
    await db.flush()
    await db.refresh(scenario)
    return _scenario_response(scenario, roles)


@router.get("/scenarios", response_model=list[ScenarioSummary])
async def list_scenarios(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    _require_simulation_rights(roles)
    result = await db.execute(
        select(MarginScenario)
        .where(MarginScenario.created_by == user.id)
        .order_by(MarginScenario.id.desc())
    )
    return [ScenarioSummary.model_validate(s) for s in result.scalars().all()]


@router.get("/scenarios/{scenario_id}", response_model=ScenarioResponse)
async def get_scenario(
    scenario_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    scenario = await _get_owned_scenario(db, scenario_id, user, roles)
    return _scenario_response(scenario, roles)


@router.delete("/scenarios/{scenario_id}", status_code=204)
async def delete_scenario(
    scenario_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
    roles: Annotated[list[str], Depends(get_user_roles)],
):
    scenario = await _get_owned_scenario(db, scenario_id, user, roles)
    await db.delete(scenario)
    return None
