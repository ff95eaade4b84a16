"""
In-memory manifest store.

Stands in for the external API directory: it serves manifests and
credential records and remembers compiled-plugin metadata.
"""
import copy
import logging
from typing import Any, Dict, List, Optional

from agent_bridge.domains.manifest import Manifest
from agent_bridge.interfaces.repositories.manifest import ManifestStore

# Setup logger for this module
logger = logging.getLogger(__name__)


class InMemoryManifestStore(ManifestStore):
    """Dictionary-backed ManifestStore."""

    def __init__(self):
        self._manifests: Dict[str, Manifest] = {}
        self._credentials: Dict[str, Dict[str, Any]] = {}
        self.plugin_metadata: Dict[str, Dict[str, Any]] = {}

    def add_manifest(
        self, manifest: Manifest, credentials: Optional[Dict[str, Any]] = None
    ) -> Manifest:
        self._manifests[manifest.name] = manifest
        if credentials is not None:
            self.set_credentials(manifest.name, credentials)
        logger.info(f"Added manifest {manifest.name} to store")
        return manifest

    def set_credentials(self, name: str, credentials: Dict[str, Any]) -> None:
        if name not in self._manifests:
            raise KeyError(f'API "{name}" not found in store')
        self._credentials[name] = copy.deepcopy(credentials)

    def remove(self, name: str) -> None:
        self._manifests.pop(name, None)
        self._credentials.pop(name, None)
        self.plugin_metadata.pop(name, None)

    def get_manifest(self, name: str) -> Optional[Manifest]:
        return self._manifests.get(name)

    def list_manifests(self) -> List[Manifest]:
        return list(self._manifests.values())

    def get_credentials(self, name: str) -> Optional[Dict[str, Any]]:
        credentials = self._credentials.get(name)
        return copy.deepcopy(credentials) if credentials is not None else None

    def save_plugin_metadata(self, name: str, metadata: Dict[str, Any]) -> None:
        self.plugin_metadata[name] = dict(metadata)
