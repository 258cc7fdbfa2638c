from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, Literal
from datetime import datetime

DEFAULT_FOLDER = "INBOX"
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

class DateRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @model_validator(mode="after")
    def check_order(self) -> "DateRange":
        if self.start and self.end and self.start > self.end:
            raise ValueError(f"Date range start {self.start} is after end {self.end}")
        return self

class DateReference(BaseModel):
    """One date mention found in the text, before range disambiguation."""
    model_config = ConfigDict(frozen=True)

    instant: datetime
    matched_text: str
    kind: Literal["specific", "month", "relative"]
    is_month_only: bool = False
    position: int = Field(default=0, description="Offset of the mention in the normalized text")

class EntityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender: Optional[str] = None
    keyword: Optional[str] = None
    is_complex_query: bool = False

class SearchQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: Optional[str] = Field(default=None, description="Plain term or subject/body composite expression")
    is_complex_query: bool = Field(default=False, description="True when keyword uses the subject:/body: form")
    start_date: Optional[datetime] = Field(default=None, description="Inclusive lower bound")
    end_date: Optional[datetime] = Field(default=None, description="Inclusive upper bound")
    sender: Optional[str] = Field(default=None, description="Sender address, name or domain fragment")
    folder: str = DEFAULT_FOLDER
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)

    @model_validator(mode="after")
    def check_date_order(self) -> "SearchQuery":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

class ParsedSearch(BaseModel):
    query: SearchQuery
    search_description: str
    original_query: str = ""

class EmailMessage(BaseModel):
    id: str
    subject: str = ""
    sender: str = Field(description="From address")
    sender_name: Optional[str] = Field(default=None, description="Display name of the sender")
    body: str = ""
    date: datetime
    folder: str = DEFAULT_FOLDER
