from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from seat_booking.api.v1 import routes_booking, routes_health, routes_price, routes_seats
from seat_booking.core.config import settings
from seat_booking.core.logging import configure_logging
from seat_booking.db import session
from seat_booking.exceptions import BookingError
from seat_booking.redis import close_redis
from seat_booking.services.pricing import price_table_provider


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    if settings.ENV == 'development':
        await session.init_db()
        await session.provision_venue()
    async with session.async_session() as db:
        await price_table_provider.load(db)
    yield
    await close_redis()
    await session.engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.PROJECT_DESCRIPTION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in (routes_health.router, routes_seats.router, routes_booking.router, routes_price.router):
        app.include_router(
            router,
            prefix=settings.API_V1_PREFIX
        )

    @app.exception_handler(BookingError)
    async def booking_error_handler(request, ex: BookingError):
        return JSONResponse(status_code=ex.status_code, content={"error": ex.message})

    @app.get("/")
    async def root():
        return {"message": "Seat booking backend is running"}
    return app


app = create_app()
