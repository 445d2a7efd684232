"""Release services.

Services implement the release steps, coordinating between the domain layer
(core/) and infrastructure (platform/, git/, FTP).
"""

from wpt.services.archive import ArchiveError, build_archive
from wpt.services.credentials import (
    CredentialProvider,
    JsonCredentialStore,
    MemoryCredentialStore,
)
from wpt.services.release import ReleaseError, ReleaseService
from wpt.services.upload import FtpTransport, Transport, UploadError

__all__ = [
    # Archive
    "ArchiveError",
    "build_archive",
    # Credentials
    "CredentialProvider",
    "JsonCredentialStore",
    "MemoryCredentialStore",
    # Release
    "ReleaseError",
    "ReleaseService",
    # Upload
    "FtpTransport",
    "Transport",
    "UploadError",
]
