"""Pydantic schemas for the betbridge REST facade."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class BetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selection: str = ""
    amount: int = 0
    password: str = ""
    wager_type: int = Field(default=0, alias="wagerType")


class BalanceSchema(BaseModel):
    current: int
    available: int
    atRisk: int


class LoginResponse(BaseModel):
    success: bool
    sessionId: str
    balance: BalanceSchema
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    errorKind: str | None = None
