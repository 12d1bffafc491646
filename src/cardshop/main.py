import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, Response, status, APIRouter
from sqlalchemy.orm import Session

from . import models, schemas, crud, database, errors, keepalive, services
from .config import Config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    models.Base.metadata.create_all(bind=database.engine)
    keepalive_task = None
    if Config.KEEPALIVE_INTERVAL_SECONDS > 0:
        keepalive_task = asyncio.create_task(
            keepalive.run_keepalive(database.engine, Config.KEEPALIVE_INTERVAL_SECONDS)
        )
    logger.info("Card shop ledger ready")
    yield
    if keepalive_task is not None:
        keepalive_task.cancel()
        with suppress(asyncio.CancelledError):
            await keepalive_task
    database.dispose_engine()
    logger.info("Connection pool drained")


app = FastAPI(title="Card Shop Ledger", lifespan=lifespan)


def _http_error(exc: errors.LedgerError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


# Load-test support; wipes the ledger, so only mounted on request
router = APIRouter(prefix="/test", tags=["test"])


@router.post("/reset-db", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
def reset_database(db: Session = Depends(database.get_db)):
    """
    Clear all data from database tables. For testing purposes only.
    """
    try:
        with database.transaction(db):
            # children before parents
            db.query(models.PackTransaction).delete()
            db.query(models.CustomerPack).delete()
            db.query(models.EventRegistration).delete()
            db.query(models.Event).delete()
            db.query(models.Customer).delete()
    except errors.LedgerError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if Config.ENABLE_TEST_ROUTES:
    app.include_router(router)


# Events

@app.post(
    "/api/events/join",
    response_model=schemas.Message,
    responses={
        200: {"description": "Registered", "content": {"application/json": {"example": schemas.Message.model_config["json_schema_extra"]["example"]}}},
        400: {"description": "Bad Request", "content": {"application/json": {"example": {"detail": "Name and Contact Info are required."}}}},
        404: {"description": "Not Found", "content": {"application/json": {"example": {"detail": "Event not found"}}}},
        409: {"description": "Full or already registered", "content": {"application/json": {"example": {"detail": "Event is full"}}}},
    },
)
def join_event(request: schemas.JoinEventRequest, db: Session = Depends(database.get_db)):
    """Register a player for an event.

    - The customer is looked up by `contact_info` and created on first visit; a known
      customer keeps their stored name.
    - Returns 404 for an unknown event, 409 when the event is full or the customer is
      already registered, 400 when name or contact is blank.
    """
    try:
        services.join_event(db, request.event_id, request.player_name, request.contact_info, request.has_paid)
    except errors.LedgerError as e:
        raise _http_error(e)
    return {"message": "Registration successful! See you there."}


@app.put(
    "/api/events/registration/{registration_id}/toggle-pay",
    response_model=schemas.Message,
    responses={404: {"description": "Not Found", "content": {"application/json": {"example": {"detail": "Registration not found"}}}}},
)
def toggle_payment(registration_id: int, db: Session = Depends(database.get_db)):
    try:
        services.toggle_payment(db, registration_id)
    except errors.LedgerError as e:
        raise _http_error(e)
    return {"message": "Payment status updated"}


@app.post(
    "/api/events/create",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.Event,
    responses={
        201: {"description": "Event scheduled", "content": {"application/json": {"example": schemas.Event.model_config["json_schema_extra"]["example"]}}},
    },
)
def create_event(event: schemas.EventCreate, response: Response, db: Session = Depends(database.get_db)):
    """Schedule an event. Returns 201 and a Location header; the player count starts at 0."""
    try:
        db_event = crud.create_event(db, event)
    except errors.LedgerError as e:
        raise _http_error(e)
    response.headers["Location"] = f"/api/events/{db_event.id}/players"
    return db_event


@app.get("/api/events", response_model=list[schemas.Event])
def read_events(admin: bool = False, db: Session = Depends(database.get_db)):
    """Upcoming events, newest first. `?admin=true` includes past events."""
    try:
        return crud.list_events(db, include_past=admin)
    except errors.LedgerError as e:
        raise _http_error(e)


@app.get(
    "/api/events/{event_id}/players",
    response_model=list[schemas.EventPlayer],
    responses={404: {"description": "Not Found", "content": {"application/json": {"example": {"detail": "Event not found"}}}}},
)
def read_event_players(event_id: int, db: Session = Depends(database.get_db)):
    """Players of an event, unpaid first."""
    try:
        return crud.list_event_players(db, event_id)
    except errors.LedgerError as e:
        raise _http_error(e)


# Pack storage

@app.get("/api/storage", response_model=list[schemas.StorageEntry])
def read_storage(db: Session = Depends(database.get_db)):
    """All non-empty pack balances, most recently changed first."""
    try:
        return services.list_storage(db)
    except errors.LedgerError as e:
        raise _http_error(e)


@app.get("/api/storage/history/{customer_id}", response_model=list[schemas.StorageHistoryEntry])
def read_storage_history(customer_id: int, db: Session = Depends(database.get_db)):
    try:
        return services.storage_history(db, customer_id)
    except errors.LedgerError as e:
        raise _http_error(e)


@app.post(
    "/api/storage/update",
    response_model=schemas.Message,
    responses={
        200: {"description": "Balance changed and logged", "content": {"application/json": {"example": {"message": "Storage updated & Logged!"}}}},
        403: {"description": "Deposit without attendance", "content": {"application/json": {"example": {"detail": "Customer did not join that event."}}}},
        409: {"description": "Insufficient balance", "content": {"application/json": {"example": {"detail": "Not enough packs to withdraw."}}}},
    },
)
def update_storage(request: schemas.StorageUpdateRequest, db: Session = Depends(database.get_db)):
    """Deposit (positive `change_amount`) or withdraw (negative) packs.

    Deposits must name an `event_id` the customer registered for. Every accepted
    change is written to the audit log in the same transaction.
    """
    try:
        services.adjust_balance(
            db,
            request.customer_id,
            request.game_title,
            request.change_amount,
            pack_type=request.pack_type,
            event_id=request.event_id,
        )
    except errors.LedgerError as e:
        raise _http_error(e)
    return {"message": "Storage updated & Logged!"}


# Customers

@app.get("/api/customers", response_model=list[schemas.Customer])
def read_customers(search: Optional[str] = None, db: Session = Depends(database.get_db)):
    try:
        return crud.list_customers(db, search=search)
    except errors.LedgerError as e:
        raise _http_error(e)


@app.post(
    "/api/customers/create",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.CustomerCreated,
    responses={
        400: {"description": "Bad Request", "content": {"application/json": {"example": {"detail": "Name and Contact Info are required."}}}},
        409: {"description": "Conflict - contact exists", "content": {"application/json": {"example": {"detail": "A customer with this phone/email already exists."}}}},
    },
)
def create_customer(customer: schemas.CustomerCreate, db: Session = Depends(database.get_db)):
    try:
        db_customer = crud.create_customer(db, customer)
    except errors.LedgerError as e:
        raise _http_error(e)
    return {"message": "Customer profile created!", "id": db_customer.id}


@app.get("/api/customers/search", response_model=list[schemas.CustomerSummary])
def search_customers(q: str = "", db: Session = Depends(database.get_db)):
    """Up to five customers whose name contains `q`."""
    try:
        return crud.search_customers(db, q)
    except errors.LedgerError as e:
        raise _http_error(e)


@app.get("/api/customers/{customer_id}/recent-events", response_model=list[schemas.RecentEvent])
def read_recent_events(customer_id: int, db: Session = Depends(database.get_db)):
    """The last five events a customer registered for."""
    try:
        return crud.recent_events_for_customer(db, customer_id)
    except errors.LedgerError as e:
        raise _http_error(e)
