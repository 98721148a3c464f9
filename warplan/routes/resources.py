# warplan/routes/resources.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from warplan.game.resources import (
    ResourcePool,
    backward_allocation,
    clamp_percentage,
    forward_totals,
)
from warplan.game.travel import format_duration

router = APIRouter(prefix="/resources", tags=["resources"])


class ForwardItem(BaseModel):
    unit_name: str = ""
    count: int = Field(default=0, ge=0)


class ForwardRequest(BaseModel):
    tribe: Optional[str] = None
    items: list[ForwardItem] = Field(default_factory=list)
    hourly_crop_reserve: float = Field(default=0, ge=0)


class AllocationItem(BaseModel):
    # "" means no unit selected for this slot
    unit_name: str = ""
    percentage: float = Field(default=0, ge=0, le=100)


class BackwardRequest(BaseModel):
    tribe: Optional[str] = None
    wood: float = Field(default=0, ge=0)
    clay: float = Field(default=0, ge=0)
    iron: float = Field(default=0, ge=0)
    crop: float = Field(default=0, ge=0)
    crop_reserve: float = Field(default=0, ge=0)
    allocations: list[AllocationItem] = Field(default_factory=list)


class ClampRequest(BaseModel):
    percentages: list[float]
    index: int = Field(ge=0)
    value: float


@router.post("/forward")
def forward(payload: ForwardRequest) -> dict:
    totals = forward_totals(
        [(i.unit_name, i.count) for i in payload.items],
        hourly_crop_reserve=payload.hourly_crop_reserve,
        tribe=payload.tribe,
    )
    return {
        "totals": totals.to_dict(),
        "training_time": format_duration(totals.training_time),
    }


@router.post("/backward")
def backward(payload: BackwardRequest) -> dict:
    result = backward_allocation(
        ResourcePool(wood=payload.wood, clay=payload.clay, iron=payload.iron, crop=payload.crop),
        payload.crop_reserve,
        [(a.unit_name, a.percentage) for a in payload.allocations],
        tribe=payload.tribe,
    )
    return {
        "standard": [{"unit_name": n, "count": c} for n, c in result.standard],
        "gold": [{"unit_name": n, "count": c} for n, c in result.gold],
        "total_sum": result.total_sum,
        "available_for_gold": result.available_for_gold,
    }


@router.post("/allocation/clamp")
def clamp(payload: ClampRequest) -> dict:
    if payload.index >= len(payload.percentages):
        raise HTTPException(status_code=400, detail="index out of range")
    out = clamp_percentage(payload.percentages, payload.index, payload.value)
    return {"percentages": out, "total": sum(out)}
