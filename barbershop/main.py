# barbershop/main.py

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from barbershop.config import LOG_LEVEL
from barbershop.repository import UnknownCustomerError, UnknownProviderError
from barbershop.routers.appointments_routes import router as appointments_router
from barbershop.routers.auth_routes import router as auth_router
from barbershop.routers.barbers_routes import router as barbers_router
from barbershop.routers.users_routes import router as users_router

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("passlib").setLevel(logging.ERROR)

app = FastAPI(title="Barbershop Booking API", version="1.0.0")


@app.exception_handler(UnknownProviderError)
async def unknown_provider_handler(request: Request, exc: UnknownProviderError):
    logger.warning(f"{request.method} {request.url.path}: unknown barber {exc}")
    return JSONResponse(status_code=404, content={"detail": "Barber Not Found"})


@app.exception_handler(UnknownCustomerError)
async def unknown_customer_handler(request: Request, exc: UnknownCustomerError):
    logger.warning(f"{request.method} {request.url.path}: unknown customer {exc}")
    return JSONResponse(status_code=404, content={"detail": "User Not Found"})


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(barbers_router)
app.include_router(appointments_router)
