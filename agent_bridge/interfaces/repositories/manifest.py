from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from agent_bridge.domains.manifest import Manifest


class ManifestStore(ABC):
    """Interface for the directory that owns manifests and credentials.

    Persistent storage lives outside this package; the core only reads
    manifests and credential maps and reports compiled-plugin metadata back.
    """

    @abstractmethod
    def get_manifest(self, name: str) -> Optional[Manifest]:
        """Look up a manifest by name."""
        pass

    @abstractmethod
    def list_manifests(self) -> List[Manifest]:
        """List all known manifests."""
        pass

    @abstractmethod
    def get_credentials(self, name: str) -> Optional[Dict[str, Any]]:
        """Get the credential record for an API."""
        pass

    @abstractmethod
    def save_plugin_metadata(self, name: str, metadata: Dict[str, Any]) -> None:
        """Persist metadata about a compiled plugin."""
        pass
