"""Application model - CRM application/case records that tasks relate to."""

from pydantic import BaseModel, ConfigDict, Field


class Application(BaseModel):
    """Application record (read-only lookup target)."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Application ID")
    tenant_id: str = Field(..., description="Owning tenant ID")
