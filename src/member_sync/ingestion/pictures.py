"""
Profile pictures from the bioguide photo archive.

Downloaded images are written to a local directory; the public URI under
which that directory is served is recorded on the member.
"""
import logging
from pathlib import Path
from typing import Optional

from member_sync.config.constants import BIOGUIDE_BASE_URL
from member_sync.config.settings import settings
from member_sync.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


def picture_url(member_id: str) -> str:
    return f"{BIOGUIDE_BASE_URL}/bioguide/photo/{member_id[0]}/{member_id}.jpg"


class LocalPictureStore:
    """Write pictures under a base directory and map them to public URIs."""
    
    def __init__(self, base_path: Optional[str] = None, base_uri: Optional[str] = None):
        self.base_path = Path(base_path or settings.PICTURE_DIR)
        self.base_uri = (base_uri or settings.PICTURE_BASE_URI).rstrip("/")
    
    def save(self, member_id: str, content: bytes) -> str:
        path = self.base_path / f"{member_id}.jpg"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.debug(f"Wrote {len(content)} bytes to {path}")
        return f"{self.base_uri}/{member_id}.jpg"


class ProfilePictureFetcher:
    """Download a member's picture and store it."""
    
    def __init__(self, transport, store: Optional[LocalPictureStore] = None):
        self.transport = transport
        self.store = store or LocalPictureStore()
    
    async def __call__(self, member_id: str) -> str:
        """
        Returns:
            Public URI of the stored picture
            
        Raises:
            UpstreamUnavailable: if the picture cannot be downloaded
        """
        content = await self.transport.fetch(picture_url(member_id))
        if not content:
            raise UpstreamUnavailable("bioguide", f"empty picture for {member_id}")
        return self.store.save(member_id, content)
