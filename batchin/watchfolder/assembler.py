"""Assembly of watchfolder messages from catalog entities."""

from collections.abc import Callable
from datetime import datetime, timezone

from batchin.core.config import Settings
from batchin.core.errors import SidecarDerivationError
from batchin.database.models import Batch, ContentRecord
from batchin.watchfolder.models import FileType, SipPackage, WatchfolderMessage
from batchin.watchfolder.sidecar import derive_sidecar_name

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class MessageAssembler:
    """Builds one watchfolder message per content record."""

    def __init__(
        self,
        cp_name: str,
        username: str = "",
        password: str = "",
        clock: Clock = utc_now,
    ) -> None:
        """Initialize assembler.

        Args:
            cp_name: Source system name put on every message
            username: Credential placeholder for the watcher
            password: Credential placeholder for the watcher
            clock: Time source, read once per message
        """
        self.cp_name = cp_name
        self.username = username
        self.password = password
        self.clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, clock: Clock = utc_now
    ) -> "MessageAssembler":
        """Create an assembler from application settings."""
        return cls(
            cp_name=settings.CP_NAME,
            username=settings.WATCHFOLDER_USERNAME,
            password=settings.WATCHFOLDER_PASSWORD,
            clock=clock,
        )

    def assemble(self, batch: Batch, record: ContentRecord) -> WatchfolderMessage:
        """Compose the message for one content record.

        Args:
            batch: Owning batch
            record: Content record to announce

        Returns:
            Message with the essence package followed by the sidecar package

        Raises:
            SidecarDerivationError: If no sidecar name can be derived
        """
        sidecar_name = derive_sidecar_name(record.file_name)
        if sidecar_name is None:
            raise SidecarDerivationError(record.file_name)

        timestamp = self.clock()
        return WatchfolderMessage(
            cp_name=self.cp_name,
            flow_id=batch.batch_id,
            server=batch.host,
            username=self.username,
            password=self.password,
            timestamp=timestamp,
            sip_package=[
                SipPackage(
                    file_name=record.file_name,
                    file_path=batch.path,
                    file_type=FileType.ESSENCE,
                    md5=record.checksum,
                    timestamp=timestamp,
                ),
                SipPackage(
                    file_name=sidecar_name,
                    file_path=batch.path,
                    file_type=FileType.SIDECAR,
                    md5="",
                    timestamp=timestamp,
                ),
            ],
        )
