"""
Pricing endpoints — quote preview and quote lock.

Preview is side-effect free and may be repeated. Lock requires an
authenticated user and persists the priced quote for
``PRICING_LOCK_TTL_MINUTES``. Pricing errors are rendered by the
``PricingError`` handler registered in ``app.main``.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_rate_source
from app.database import get_db
from app.schemas.pricing import LockResponse, QuoteRequest, QuoteResponse
from app.services.pricing_service import PricingService
from app.services.quote_lock_service import QuoteLockService

router = APIRouter()


def _query_request(
    tx_type: str | None = Query(None, alias="txType", examples=["TRANSFER"]),
    amount: str | None = Query(None, examples=["1000"]),
    from_currency: str | None = Query(None, alias="fromCurrency", examples=["EUR"]),
    to_currency: str | None = Query(None, alias="toCurrency", examples=["XOF"]),
    country: str | None = Query(None, examples=["CI"]),
    operator: str | None = Query(None),
    provider: str | None = Query(None),
) -> QuoteRequest:
    return QuoteRequest(
        tx_type=tx_type,
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        country=country,
        operator=operator,
        provider=provider,
    )


async def _preview(payload: QuoteRequest, db: AsyncSession, rate_source) -> QuoteResponse:
    quote = await PricingService(db, rate_source).preview(payload.model_dump())
    return QuoteResponse.model_validate({"ok": True, "mode": "QUOTE", **quote.to_dict()})


@router.get("/quote", response_model=QuoteResponse)
async def get_quote(
    payload: QuoteRequest = Depends(_query_request),
    db: AsyncSession = Depends(get_db),
    rate_source=Depends(get_rate_source),
):
    """Preview a quote from query parameters. No side effects."""
    return await _preview(payload, db, rate_source)


@router.post("/quote", response_model=QuoteResponse)
async def post_quote(
    payload: QuoteRequest,
    db: AsyncSession = Depends(get_db),
    rate_source=Depends(get_rate_source),
):
    """Preview a quote from a JSON body. No side effects."""
    return await _preview(payload, db, rate_source)


@router.post("/lock", response_model=LockResponse, status_code=status.HTTP_201_CREATED)
async def lock_quote(
    payload: QuoteRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    rate_source=Depends(get_rate_source),
):
    """
    Price the request and reserve the quote for the authenticated user.

    The returned ``quoteId`` can be redeemed by the execution service
    until ``expiresAt``. Locks are single-use.
    """
    lock = await PricingService(db, rate_source).lock(user_id, payload.model_dump())
    return LockResponse.model_validate({"ok": True, "mode": "LOCKED", **lock.to_dict()})


@router.get("/lock/{quote_id}", response_model=LockResponse)
async def get_lock(
    quote_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Read one of the caller's locks with its effective (lazily expired) status."""
    lock = await QuoteLockService(db).get(quote_id, user_id)
    return LockResponse.model_validate({"ok": True, "mode": "LOCKED", **lock.to_dict()})
