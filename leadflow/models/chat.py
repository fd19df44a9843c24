"""Chat import models - parsed WhatsApp transcripts and import results"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class ParsedMessage(BaseModel):
    """Single message extracted from a chat export"""
    timestamp: datetime
    sender: str
    message: str
    is_from_lead: bool


class DateRange(BaseModel):
    """First and last message timestamps"""
    start: datetime = Field(serialization_alias="from")
    end: datetime = Field(serialization_alias="to")


class ParsedChat(BaseModel):
    """Parsed chat, messages sorted ascending by timestamp"""
    lead_phone: str
    messages: List[ParsedMessage]
    date_range: DateRange
    lead_message_count: int
    my_message_count: int


class ReconcileResult(BaseModel):
    """Net-new messages after removing those already recorded"""
    new_messages: List[ParsedMessage]
    duplicates: int


class ChatImportRequest(BaseModel):
    """Pasted chat text plus optional details for a new lead"""
    chat_text: str
    lead_name: Optional[str] = None
    business_type: Optional[str] = None
    my_sender_name: Optional[str] = None


class ChatImportPreview(BaseModel):
    """What an import would do, without writing anything"""
    chat: ParsedChat
    existing_lead_id: Optional[str] = None
    existing_lead_name: Optional[str] = None
    new_messages: int
    duplicates: int


class ChatImportResult(BaseModel):
    """Outcome of an applied import"""
    lead_id: str
    lead_created: bool
    lead_phone: str
    imported: int
    duplicates: int
    date_range: DateRange
