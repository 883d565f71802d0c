"""Correspondence Store - named external identifier maps with file persistence.

External identifier maps are kept in memory by name and can be written to /
read from a directory as canonical JSON:

    {map_directory}/{map_name}.map.json

Usage:
    from sysml_bridge.core.correspondence_store import CorrespondenceStore

    store = CorrespondenceStore("/projects/satellite/maps")
    store.save(identifier_map)            # in memory
    store.save_to_file(identifier_map.name)

    identifier_map = store.load_from_file("satellite-mapping")
"""

import json
import logging
import re
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from ..config.settings import get_setting
from ..models.correspondence import ExternalIdentifierMap

logger = logging.getLogger(__name__)

MAP_FILE_SUFFIX = ".map.json"

_UNSAFE_FILE_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


class CorrespondenceStoreError(Exception):
    """Base exception for correspondence store errors."""
    pass


class MapNotFoundError(CorrespondenceStoreError):
    """Raised when a named map is not in the store or on disk."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"External identifier map '{name}' not found")


class CorruptMapError(CorrespondenceStoreError):
    """Raised when a persisted map fails schema validation."""
    pass


def map_file_name(name: str) -> str:
    """File name for a map; characters unsafe in file names become '_'."""
    safe = _UNSAFE_FILE_CHARS.sub('_', name).strip('_') or 'unnamed'
    return f"{safe}{MAP_FILE_SUFFIX}"


class CorrespondenceStore:
    """Thread-safe storage for external identifier maps."""

    def __init__(self, map_directory: Optional[Union[str, Path]] = None):
        self.map_directory = Path(map_directory or get_setting('map_directory'))
        self._maps: Dict[str, ExternalIdentifierMap] = {}
        self._lock = threading.RLock()

    def save(self, identifier_map: ExternalIdentifierMap) -> None:
        """Store a copy of ``identifier_map`` under its name (replacing any previous one)."""
        with self._lock:
            self._maps[identifier_map.name] = identifier_map.model_copy(deep=True)
            logger.debug(
                f"Stored map '{identifier_map.name}' v{identifier_map.version} "
                f"({len(identifier_map.correspondences)} correspondences)"
            )

    def get(self, name: str) -> ExternalIdentifierMap:
        """Copy of the map stored under ``name``.

        Raises:
            MapNotFoundError: If no map has that name
        """
        with self._lock:
            if name not in self._maps:
                raise MapNotFoundError(name)
            return self._maps[name].model_copy(deep=True)

    def delete(self, name: str) -> bool:
        with self._lock:
            return self._maps.pop(name, None) is not None

    def list_names(self) -> List[str]:
        with self._lock:
            return sorted(self._maps.keys())

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._maps

    def __len__(self) -> int:
        with self._lock:
            return len(self._maps)

    # ------------------------------------------------------------------
    # File persistence
    # ------------------------------------------------------------------

    def save_to_file(self, name: str) -> Path:
        """Write the stored map ``name`` to the map directory.

        Returns:
            Path to the written file

        Raises:
            MapNotFoundError: If no map has that name
        """
        identifier_map = self.get(name)

        self.map_directory.mkdir(parents=True, exist_ok=True)
        file_path = self.map_directory / map_file_name(name)

        data = identifier_map.model_dump(mode="json")

        # Sorted keys for stable, diff-friendly files
        with open(file_path, "w") as f:
            json.dump(data, f, indent=2, sort_keys=True)

        logger.info(f"Saved external identifier map '{name}' to {file_path}")
        return file_path

    def load_from_file(self, name: str) -> ExternalIdentifierMap:
        """Read map ``name`` from the map directory and store it.

        Raises:
            MapNotFoundError: If the file does not exist
            CorruptMapError: If the file is not a valid map
        """
        file_path = self.map_directory / map_file_name(name)

        if not file_path.exists():
            raise MapNotFoundError(name)

        try:
            with open(file_path) as f:
                identifier_map = ExternalIdentifierMap.model_validate(json.load(f))
        except (json.JSONDecodeError, ValidationError) as e:
            raise CorruptMapError(f"Invalid external identifier map file {file_path}: {e}") from e

        self.save(identifier_map)
        logger.info(f"Loaded external identifier map '{name}' from {file_path}")
        return identifier_map

    def list_persisted(self) -> List[str]:
        """Names of the maps persisted in the map directory (file stems)."""
        if not self.map_directory.exists():
            return []
        return sorted(
            p.name[:-len(MAP_FILE_SUFFIX)]
            for p in self.map_directory.glob(f"*{MAP_FILE_SUFFIX}")
        )
