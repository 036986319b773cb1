"""Resource loader for populating the store from the filesystem.

Clusters, StateStores and Secrets are read from yaml (or json) files, any other
documents in the files are skipped. The loader is stateless apart from
remembering which files it already read, all loaded objects are returned to
the caller to add to a store.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncGenerator

import aiofiles
import yaml

from kratix_local.manifest import BaseManifest, parse_raw_obj
from kratix_local.exceptions import KratixException, InputException

__all__ = ["ResourceLoader", "LoadOptions"]

_LOGGER = logging.getLogger(__name__)

SUFFIXES = (".yaml", ".yml", ".json")


@dataclass
class LoadOptions:
    """Options for loading resources.

    Attributes:
        path: Filesystem path to load resources from. Can be a file or directory.
        recursive: If True and path is a directory, load resources from all
                  subdirectories as well.
    """

    path: Path
    recursive: bool = True

    def __post_init__(self) -> None:
        """Resolve the path after initialization."""
        self.path = Path(self.path).expanduser().resolve()


class ResourceLoader:
    """Loads resources from the filesystem."""

    def __init__(self) -> None:
        """Initialize the resource loader."""
        self._processed_files: set[Path] = set()

    async def load(self, options: LoadOptions) -> AsyncGenerator[BaseManifest, None]:
        """Load resources from the given options.

        Raises:
            KratixException: If the path does not exist or a file can't be
                read or parsed.
        """
        _LOGGER.info("Loading resources from %s", options.path)

        if not options.path.exists():
            raise KratixException(f"Path does not exist: {options.path}")

        if options.path.is_file():
            async for resource in self._load_file(options.path):
                yield resource
        elif options.path.is_dir():
            async for resource in self._load_directory(options.path, options):
                yield resource
        else:
            raise KratixException(f"Path is not a file or directory: {options.path}")

        _LOGGER.info("Finished loading resources")

    async def _load_directory(
        self, path: Path, options: LoadOptions
    ) -> AsyncGenerator[BaseManifest, None]:
        _LOGGER.debug("Loading directory: %s", path)

        for entry in sorted(path.iterdir()):
            if entry.is_file() and entry.suffix.lower() in SUFFIXES:
                async for resource in self._load_file(entry):
                    yield resource
            elif options.recursive and entry.is_dir():
                async for resource in self._load_directory(entry, options):
                    yield resource

    async def _load_file(self, path: Path) -> AsyncGenerator[BaseManifest, None]:
        if path in self._processed_files:
            _LOGGER.debug("Skipping already processed file: %s", path)
            return

        _LOGGER.debug("Processing file: %s", path)
        self._processed_files.add(path)

        try:
            async with aiofiles.open(path, encoding="utf-8") as resource_file:
                content = await resource_file.read()
        except (OSError, UnicodeDecodeError) as e:
            raise KratixException(f"Failed to read file {path}: {e}") from e

        try:
            docs = list(yaml.safe_load_all(content))
        except yaml.YAMLError as e:
            raise KratixException(f"Invalid YAML in file {path}: {e}") from e

        for doc in docs:
            if not doc:
                continue
            if not isinstance(doc, dict):
                _LOGGER.info("Skipping document in %s: not a mapping", path)
                continue
            try:
                yield parse_raw_obj(doc)
            except InputException as e:
                _LOGGER.info("Skipping document in %s: %s", path, e)
