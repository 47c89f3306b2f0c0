import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CustomerStatus = Literal[
    "new",
    "contacted",
    "interested",
    "not_interested",
    "meeting_scheduled",
    "proposal_sent",
    "negotiation",
    "won",
    "lost",
]

ContactType = Literal["call", "message", "email", "meeting"]

CustomerSource = Literal["crawl", "excel", "manual"]

Category = Literal[
    "buildingServices",
    "education",
    "realState",
    "cosmetic",
    "healthcare&beauty",
    "dentists",
    "pets",
    "marketings",
    "sweets",
    "resturants",
    "other",
    "insurance",
    "contentcreation",
    "homeStaffs",
    "cars",
    "finance",
    "transportation",
    "clothes",
    "imagination",
    "music",
    "exchange",
    "foodsuply",
    "accountant",
    "lawer",
    "athlit",
    "tourism",
    "flowe",
    "supermarket",
]


class CamelModel(BaseModel):
    # snake_case in Python, camelCase on the wire and on disk
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Value Objects ---


class Note(CamelModel):
    content: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None


class ContactEntry(CamelModel):
    type: ContactType
    notes: str = Field(min_length=1)
    date: datetime = Field(default_factory=datetime.utcnow)
    created_by: Optional[str] = None


# --- Aggregate Root ---


class Customer(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    email: Optional[str] = None
    instagram: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    country: str = "Unknown"
    category: Category = "other"
    status: CustomerStatus = "new"
    source: CustomerSource
    notes: List[Note] = Field(default_factory=list)
    contact_history: List[ContactEntry] = Field(default_factory=list)
    last_contacted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
