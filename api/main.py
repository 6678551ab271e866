"""
FastAPI server for HelpHive.

Run with: uvicorn api.main:app
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException, Header, Depends
from pydantic import BaseModel, Field

from helphive import HelpHive, InputKind, Settings, ValidationError


def _get_service_key() -> Optional[str]:
    return os.getenv("HELPHIVE_SERVICE_KEY")


def _require_service_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    service_key = _get_service_key()
    if service_key and x_api_key != service_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


@lru_cache(maxsize=1)
def get_hive() -> HelpHive:
    return HelpHive(Settings.from_env())


app = FastAPI(title="HelpHive API", version="1.0.0")


class NormalizeRequest(BaseModel):
    input: str = Field(..., min_length=1)
    kind: InputKind = InputKind.TEXT


class NormalizeResponse(BaseModel):
    title: str
    description: str
    category: str
    urgencyLevel: str
    peopleNeeded: Union[int, str]
    taskTypes: List[str]


class PrioritizeRequest(BaseModel):
    tasks: List[Dict[str, Any]]


class PrioritizeResponse(BaseModel):
    tasks: List[Dict[str, Any]]


@app.get("/health")
def health(hive: HelpHive = Depends(get_hive)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "local_only": not hive.settings.has_credential,
        "model": hive.settings.models.get("request"),
    }


@app.post(
    "/requests/normalize",
    response_model=NormalizeResponse,
    dependencies=[Depends(_require_service_key)],
)
def normalize_request(req: NormalizeRequest, hive: HelpHive = Depends(get_hive)) -> NormalizeResponse:
    try:
        result = hive.process(req.input, kind=req.kind.value)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return NormalizeResponse(**result.to_dict())


@app.post(
    "/tasks/prioritize",
    response_model=PrioritizeResponse,
    dependencies=[Depends(_require_service_key)],
)
def prioritize_tasks(req: PrioritizeRequest, hive: HelpHive = Depends(get_hive)) -> PrioritizeResponse:
    try:
        ranked = hive.rank(req.tasks)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return PrioritizeResponse(tasks=ranked)


@app.get("/usage", dependencies=[Depends(_require_service_key)])
def usage(hive: HelpHive = Depends(get_hive)) -> Dict[str, Any]:
    return hive.usage()


@app.post("/usage/reset", dependencies=[Depends(_require_service_key)])
def reset_usage(hive: HelpHive = Depends(get_hive)) -> Dict[str, Any]:
    hive.reset_usage()
    return hive.usage()
