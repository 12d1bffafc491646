from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class Message(BaseModel):
    message: str

    model_config = ConfigDict(
        json_schema_extra={"example": {"message": "Registration successful! See you there."}}
    )


class JoinEventRequest(BaseModel):
    event_id: int
    # presence is checked by the registration service so a blank value is a 400, not a 422
    player_name: Optional[str] = None
    contact_info: Optional[str] = None
    has_paid: bool = False

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "event_id": 1,
                "player_name": "Alice",
                "contact_info": "alice@example.com",
                "has_paid": False,
            }
        }
    )


class StorageUpdateRequest(BaseModel):
    customer_id: int
    game_title: str
    pack_type: Optional[str] = None
    change_amount: int
    event_id: Optional[int] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "customer_id": 1,
                "game_title": "Hololive",
                "pack_type": "Standard Booster",
                "change_amount": 3,
                "event_id": 1,
            }
        }
    )


class StorageEntry(BaseModel):
    pack_id: int
    customer_id: int
    name: str
    contact_info: str
    game_title: str
    pack_type: str
    quantity: int
    last_updated: datetime

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "pack_id": 1,
                "customer_id": 1,
                "name": "Alice",
                "contact_info": "alice@example.com",
                "game_title": "Hololive",
                "pack_type": "Standard Booster",
                "quantity": 3,
                "last_updated": "2025-11-13T12:00:00",
            }
        },
    )


class StorageHistoryEntry(BaseModel):
    transaction_date: datetime
    game_title: str
    pack_type: str
    amount: int
    event_name: Optional[str] = None
    event_date: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "transaction_date": "2025-11-13T12:00:00",
                "game_title": "Hololive",
                "pack_type": "Standard Booster",
                "amount": -1,
                "event_name": None,
                "event_date": None,
            }
        },
    )


class EventBase(BaseModel):
    title: str
    game_title: str
    event_date: datetime
    entry_fee: float = Field(0, ge=0)
    max_players: int = Field(..., gt=0)
    description: Optional[str] = None


class EventCreate(EventBase):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Friday Locals",
                "game_title": "Hololive",
                "event_date": "2025-11-14T19:00:00",
                "entry_fee": 5.0,
                "max_players": 16,
                "description": "Best of three, swiss rounds",
            }
        }
    )


class Event(EventBase):
    id: int
    current_players: int

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Friday Locals",
                "game_title": "Hololive",
                "event_date": "2025-11-14T19:00:00",
                "entry_fee": 5.0,
                "max_players": 16,
                "current_players": 3,
                "description": "Best of three, swiss rounds",
            }
        },
    )


class EventPlayer(BaseModel):
    registration_id: int
    name: str
    contact_info: str
    registered_at: datetime
    has_paid: bool

    model_config = ConfigDict(from_attributes=True)


class CustomerCreate(BaseModel):
    name: Optional[str] = None
    contact_info: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Alice", "contact_info": "alice@example.com"}}
    )


class Customer(BaseModel):
    id: int
    name: str
    contact_info: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerSummary(BaseModel):
    id: int
    name: str
    contact_info: str

    model_config = ConfigDict(from_attributes=True)


class CustomerCreated(Message):
    id: int

    model_config = ConfigDict(
        json_schema_extra={"example": {"message": "Customer profile created!", "id": 1}}
    )


class RecentEvent(BaseModel):
    id: int
    title: str
    game_title: str
    event_date: datetime

    model_config = ConfigDict(from_attributes=True)
