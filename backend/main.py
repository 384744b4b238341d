import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import config
from engine import LevelError, LevelSet, generate_levels
from quote_llm import QuoteError, QuoteProvider, QuoteServiceError, fetch_approx_price, get_provider

from .models import GenerateRequest, LevelSetResponse, LevelsRequest

config.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Pine Script Bot", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def quote_provider() -> QuoteProvider:
    try:
        return get_provider()
    except ValueError as e:
        logger.error("Quote provider misconfigured: %s", e)
        raise HTTPException(status_code=500, detail=f"Quote provider misconfigured: {e}")


def to_response(level_set: LevelSet, provider: str = "direct") -> LevelSetResponse:
    return LevelSetResponse(
        symbol=level_set.symbol,
        base_price=level_set.base_price,
        base=level_set.base,
        raw_levels=list(level_set.raw_levels),
        adjusted_levels=list(level_set.adjusted_levels),
        labels=level_set.labelled_levels(),
        script=level_set.script,
        provider=provider,
    )


@app.get("/health")
def health():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}


@app.post("/levels", response_model=LevelSetResponse)
def levels(req: LevelsRequest):
    try:
        level_set = generate_levels(req.base_price, req.symbol)
    except LevelError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return to_response(level_set)


@app.post("/generate", response_model=LevelSetResponse)
def generate(req: GenerateRequest, provider: QuoteProvider = Depends(quote_provider)):
    symbol = req.symbol.strip()
    try:
        price = fetch_approx_price(symbol, provider=provider)
        level_set = generate_levels(price, symbol)
    except (QuoteError, LevelError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except QuoteServiceError:
        logger.error("Quote service failed for %s", symbol)
        raise HTTPException(status_code=502, detail="Price service unavailable. Please try again.")
    return to_response(level_set, provider=provider.name)


def main() -> None:
    print(f"Server: http://{config.API_HOST}:{config.API_PORT}")
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
