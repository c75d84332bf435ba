from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


class SyncStatus(BaseModel):
    """Observable state of the sync engine"""
    model_config = ConfigDict(populate_by_name=True)

    last_sync: Optional[datetime] = Field(None, alias="lastSync")
    is_syncing: bool = Field(False, alias="isSyncing")
    progress: int = Field(0, ge=0, le=100)
    error: Optional[str] = None


class SyncData(BaseModel):
    """Rows created or updated after the cursor, per entity type"""
    sales: List[Dict[str, Any]] = []
    sale_items: List[Dict[str, Any]] = []
    services: List[Dict[str, Any]] = []
    service_sales: List[Dict[str, Any]] = []
    products: List[Dict[str, Any]] = []
    customers: List[Dict[str, Any]] = []
    last_sync: Optional[datetime] = None

    @property
    def total_records(self) -> int:
        return (
            len(self.sales)
            + len(self.sale_items)
            + len(self.services)
            + len(self.service_sales)
            + len(self.products)
            + len(self.customers)
        )


class SyncPushRequest(BaseModel):
    """Outbound wire payload"""
    pharmacy_id: str
    data: SyncData
    total_records: int


class SyncAck(BaseModel):
    """Inbound acknowledgment from the cloud endpoint"""
    success: bool
    summary: Optional[Any] = None
    error: Optional[str] = None


class SyncTriggerResponse(BaseModel):
    success: bool
    data: SyncStatus
    message: Optional[str] = None
