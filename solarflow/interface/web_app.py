"""Mini README: FastAPI JSON interface for the SolarFlow ledger.

Structure:
    * create_application - application factory wiring routes to a LedgerService.
    * Request models - pydantic payloads for the write endpoints.
    * _http_error - translate ledger errors into HTTP responses.

Every endpoint is a thin wrapper around one ``LedgerService`` call. The
service is created from settings unless one is injected, which keeps tests
isolated from each other and from the demo data.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..configuration import get_settings
from ..errors import (
    DuplicateAddress,
    LedgerArithmeticError,
    LedgerError,
    NotFoundError,
    PartialDistributionError,
    ValidationError,
)
from ..ledger import LedgerService
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class DevicePayload(BaseModel):
    address: str
    name: str
    type: str
    initial_balance: Decimal = Decimal("0")
    owner: Optional[str] = None


class StatusPayload(BaseModel):
    status: str


class PaymentPayload(BaseModel):
    from_address: str
    to_address: str
    amount: Decimal
    type: str = "payment"
    energy_amount: Optional[Decimal] = None


class EnergySalePayload(BaseModel):
    buyer_address: str
    seller_address: str
    energy_amount: Decimal
    peak: bool = False


class DistributionPayload(BaseModel):
    from_address: str
    to_addresses: List[str] = Field(default_factory=list)
    total_amount: Decimal
    mode: str = "equal"
    weights: Optional[List[Decimal]] = None


class RatePayload(BaseModel):
    rate: Decimal
    peak: bool = False


def _http_error(error: LedgerError) -> HTTPException:
    """Map the ledger error taxonomy onto HTTP status codes."""

    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, DuplicateAddress):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, LedgerArithmeticError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, PartialDistributionError):
        return HTTPException(
            status_code=500,
            detail={
                "message": str(error),
                "committed": [transaction.transaction_id for transaction in error.committed],
            },
        )
    return HTTPException(status_code=500, detail=str(error))


def create_application(service: Optional[LedgerService] = None) -> FastAPI:
    """Create the FastAPI application bound to a ledger service."""

    app = FastAPI(title="SolarFlow Ledger", version="0.1.0")
    ledger = service or LedgerService.from_settings(get_settings())

    @app.get("/devices")
    async def list_devices(status: Optional[str] = None) -> JSONResponse:
        """Return registered devices in registration order."""

        try:
            devices = ledger.list_devices(status)
        except LedgerError as error:
            raise _http_error(error) from error
        LOGGER.debug("Returning %s devices", len(devices))
        return JSONResponse({"devices": [device.as_dict() for device in devices]})

    @app.post("/devices", status_code=201)
    async def add_device(payload: DevicePayload) -> JSONResponse:
        try:
            device = ledger.add_device(
                payload.address,
                payload.name,
                payload.type,
                payload.initial_balance,
                payload.owner,
            )
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse(device.as_dict(), status_code=201)

    @app.put("/devices/{address}/status")
    async def set_device_status(address: str, payload: StatusPayload) -> JSONResponse:
        try:
            ledger.set_device_status(address, payload.status)
            device = ledger.get_device(address)
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse({"address": address, "status": device.status.value})

    @app.get("/devices/{address}/balance")
    async def device_balance(address: str) -> JSONResponse:
        return JSONResponse(
            {
                "address": address,
                "balance": str(ledger.get_device_balance(address)),
                "formatted": ledger.format_balance(address),
            }
        )

    @app.post("/payments", status_code=201)
    async def send_payment(payload: PaymentPayload) -> JSONResponse:
        """Record a single transfer and return its identifier."""

        try:
            transaction_id = ledger.send_payment(
                payload.from_address,
                payload.to_address,
                payload.amount,
                payload.type,
                payload.energy_amount,
            )
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse({"transaction_id": transaction_id}, status_code=201)

    @app.post("/energy-sales", status_code=201)
    async def sell_energy(payload: EnergySalePayload) -> JSONResponse:
        """Price energy at the live rate and record the sale."""

        try:
            transaction = ledger.sell_energy(
                payload.buyer_address,
                payload.seller_address,
                payload.energy_amount,
                payload.peak,
            )
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse(transaction.as_dict(), status_code=201)

    @app.post("/distributions", status_code=201)
    async def distribute_revenue(payload: DistributionPayload) -> JSONResponse:
        try:
            transaction_ids = ledger.distribute_revenue(
                payload.from_address,
                payload.to_addresses,
                payload.total_amount,
                payload.mode,
                payload.weights,
            )
        except LedgerError as error:
            raise _http_error(error) from error
        LOGGER.info("Distribution produced %s transactions", len(transaction_ids))
        return JSONResponse({"transaction_ids": transaction_ids}, status_code=201)

    @app.get("/transactions")
    async def transactions(
        address: Optional[str] = None,
        transaction_type: Optional[str] = Query(None, alias="type"),
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
    ) -> JSONResponse:
        """Return filtered transactions, newest first."""

        try:
            results = ledger.get_transactions(
                address=address,
                transaction_type=transaction_type,
                from_date=from_date,
                to_date=to_date,
            )
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse({"transactions": [transaction.as_dict() for transaction in results]})

    @app.get("/rates")
    async def get_rate(peak: bool = False) -> JSONResponse:
        return JSONResponse({"peak": peak, "rate": str(ledger.get_rate(peak))})

    @app.put("/rates")
    async def set_rate(payload: RatePayload) -> JSONResponse:
        try:
            ledger.set_rate(payload.rate, payload.peak)
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse({"peak": payload.peak, "rate": str(ledger.get_rate(payload.peak))})

    @app.get("/summary")
    async def summary() -> JSONResponse:
        return JSONResponse(ledger.get_summary().as_dict())

    @app.get("/users")
    async def users() -> JSONResponse:
        return JSONResponse({"users": [user.as_dict() for user in ledger.list_users()]})

    return app
