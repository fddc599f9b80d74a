"""Watchfolder message models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class FileType(str, Enum):
    """Role of a file within a SIP package."""

    ESSENCE = "essence"
    SIDECAR = "sidecar"


class SipPackage(BaseModel):
    """One file of a submission information package."""

    file_name: str
    file_path: str
    file_type: FileType
    md5: str = ""
    timestamp: datetime


class WatchfolderMessage(BaseModel):
    """Notification telling the ingest watcher where an essence and sidecar live."""

    cp_name: str
    flow_id: str
    server: str
    username: str = ""
    password: str = ""
    timestamp: datetime
    sip_package: list[SipPackage] = Field(min_length=2, max_length=2)

    @property
    def essence(self) -> SipPackage:
        """The essence package."""
        return self.sip_package[0]

    @property
    def sidecar(self) -> SipPackage:
        """The sidecar package."""
        return self.sip_package[1]

    def to_json(self) -> str:
        """Serialize to compact JSON.

        Field order follows declaration order, so equal messages always
        serialize to the same bytes.
        """
        return self.model_dump_json()
