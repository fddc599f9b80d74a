"""Watchfolder message assembly and publishing."""

from batchin.watchfolder.assembler import MessageAssembler
from batchin.watchfolder.models import FileType, SipPackage, WatchfolderMessage
from batchin.watchfolder.publisher import PublisherGateway, open_transport
from batchin.watchfolder.sidecar import derive_sidecar_name

__all__ = [
    "FileType",
    "MessageAssembler",
    "PublisherGateway",
    "SipPackage",
    "WatchfolderMessage",
    "derive_sidecar_name",
    "open_transport",
]
