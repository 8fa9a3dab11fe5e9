"""VoiceProvider protocol: places automated calls that read out a code."""

from typing import Protocol


class VoiceProvider(Protocol):
    @property
    def configured(self) -> bool: ...

    async def call_with_code(self, phone: str, code: int) -> bool: ...
