from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime


class GSTSettings(SQLModel, table=True):
    __tablename__ = "gst_settings"
    id: Optional[int] = Field(default=1, primary_key=True)
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    state: str
    gst_number: Optional[str] = None
    gst_enabled: bool = True
    supported_gst_rates: List[int] = Field(default_factory=lambda: [0, 5, 12, 18], sa_column=Column(JSON))

    updated_at: datetime = Field(default_factory=datetime.utcnow)
