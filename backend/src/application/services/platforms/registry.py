"""
Platform adapter registry keyed by JobPlatform.
"""
from typing import Dict, List

from loguru import logger

from core.exceptions import PlatformNotSupportedException
from domain.enums import JobPlatform
from . import IJobPlatformAdapter


class PlatformAdapterRegistry:
    """Maps each platform to the adapter that owns its sessions."""

    def __init__(self) -> None:
        self._adapters: Dict[JobPlatform, IJobPlatformAdapter] = {}

    def register(self, adapter: IJobPlatformAdapter) -> None:
        if adapter.platform in self._adapters:
            logger.warning(f"Replacing adapter for {adapter.platform.value}")
        self._adapters[adapter.platform] = adapter

    def get(self, platform: JobPlatform) -> IJobPlatformAdapter:
        adapter = self._adapters.get(platform)
        if adapter is None:
            raise PlatformNotSupportedException(getattr(platform, "value", str(platform)))
        return adapter

    def is_supported(self, platform: JobPlatform) -> bool:
        return platform in self._adapters

    def all(self) -> List[IJobPlatformAdapter]:
        return list(self._adapters.values())

    async def close_all(self) -> None:
        for adapter in self._adapters.values():
            try:
                await adapter.close()
            except Exception as e:
                logger.warning(f"Error closing {adapter.platform.value} adapter: {e}")
