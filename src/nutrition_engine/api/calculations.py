"""Calculation endpoints over the nutrition engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from nutrition_engine.domain import rounding

if TYPE_CHECKING:
    from nutrition_engine.containers import AppContainer
    from nutrition_engine.services.calculator import (
        CalculationOutcome,
        NutritionCalculator,
    )

HTTP_UNPROCESSABLE = 422

router = APIRouter(prefix="/calculations", tags=["calculations"])


def _calculator(request: Request) -> NutritionCalculator:
    container: AppContainer = request.app.state.container
    return container.calculator


def _respond(outcome: CalculationOutcome[Any]) -> JSONResponse:
    """Return display and raw values, or the collected errors."""
    if not outcome.ok:
        return JSONResponse(
            status_code=HTTP_UNPROCESSABLE,
            content={"errors": outcome.error_payload()},
        )
    result = outcome.result
    return JSONResponse({"result": result.display(), "raw": jsonable_encoder(result)})


@router.post("/bmr")
async def bmr(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:
    """Basal metabolic rate for a profile."""
    return _respond(_calculator(request).calculate_bmr(payload))


@router.post("/energy")
async def energy(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:
    """BMR, GET and VET for a profile and objective."""
    return _respond(_calculator(request).calculate_energy(payload))


@router.post("/macros")
async def macros(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:
    """Protein, fat and carbohydrate targets for a VET."""
    return _respond(_calculator(request).distribute_macros(payload))


@router.post("/meals")
async def meals(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:
    """Macro targets split across meals."""
    return _respond(_calculator(request).split_meals(payload))


@router.post("/meals/rebalance")
async def rebalance_meals(
    request: Request, payload: dict[str, Any] = Body(...)
) -> JSONResponse:
    """Apply one percentage edit keeping the total at 100."""
    outcome = _calculator(request).rebalance_meals(payload)
    if not outcome.ok:
        return _respond(outcome)
    percentages = list(outcome.result)
    return JSONResponse(
        {
            "result": {
                "percentages": [rounding.percent(share) for share in percentages]
            },
            "raw": {"percentages": percentages},
        }
    )


@router.post("/plan")
async def plan(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:
    """Full pipeline from profile to meal targets."""
    return _respond(_calculator(request).calculate_plan(payload))


@router.post("/body-composition")
async def body_composition(
    request: Request, payload: dict[str, Any] = Body(...)
) -> JSONResponse:
    """Skinfold body-composition analysis."""
    return _respond(_calculator(request).analyze_body_composition(payload))
