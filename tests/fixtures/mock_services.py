"""Mock services for testing."""

import asyncio
from typing import Dict, List, Optional, Sequence, Union

from lull.core.interfaces import (
    EngagementAction,
    IChannel,
    ICommunityHandle,
    IFeatureToggles,
    IGenerationProvider,
    IPlatformResolver,
)


class MockToggles(IFeatureToggles):
    """Mock feature toggles; everything enabled unless switched off."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.calls: List[tuple] = []

    async def is_enabled(self, scope_id: str, feature_name: str) -> bool:
        self.calls.append((scope_id, feature_name))
        return self.enabled


class MockChannel(IChannel):
    """Mock text channel recording sent messages."""

    def __init__(
        self,
        channel_id: str,
        name: str = "general",
        position: int = 0,
        sendable: bool = True,
        fail_sends: int = 0
    ):
        self._id = channel_id
        self._name = name
        self._position = position
        self.sendable = sendable
        self.fail_sends = fail_sends
        self.sent: List[str] = []

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def position(self) -> int:
        return self._position

    def can_send(self) -> bool:
        return self.sendable

    async def send(self, content: str) -> None:
        if self.fail_sends > 0:
            self.fail_sends -= 1
            raise ConnectionError("send failed")
        self.sent.append(content)


class MockCommunity(ICommunityHandle):
    """Mock guild holding a fixed set of channels."""

    def __init__(
        self,
        community_id: str,
        channels: List[MockChannel],
        primary_channel_id: Optional[str] = None,
        name: str = "Test Guild"
    ):
        self._id = community_id
        self._name = name
        self._primary_channel_id = primary_channel_id
        self.channels = channels

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def primary_channel_id(self) -> Optional[str]:
        return self._primary_channel_id

    def text_channels(self) -> List[IChannel]:
        return list(self.channels)


class MockPlatformResolver(IPlatformResolver):
    """Mock resolver over an in-memory set of communities."""

    def __init__(self, communities: Dict[str, MockCommunity] = None, bot_user_id: str = "999"):
        self.communities = communities or {}
        self._bot_user_id = bot_user_id
        self.resolve_count = 0

    @property
    def bot_user_id(self) -> Optional[str]:
        return self._bot_user_id

    async def resolve_community(self, scope_id: str) -> Optional[ICommunityHandle]:
        self.resolve_count += 1
        return self.communities.get(scope_id)


class MockGenerationProvider(IGenerationProvider):
    """Mock generation returning scripted results in order.

    Each script entry is a string to return, None for an empty result,
    or an exception instance to raise. The last entry repeats.
    """

    def __init__(self, script: Sequence[Union[str, None, BaseException]] = ("Test message",)):
        self.script = list(script)
        self.call_count = 0
        self.actions: List[EngagementAction] = []

    async def generate(
        self,
        action: EngagementAction,
        scope_id: str,
        channel: IChannel
    ) -> Optional[str]:
        self.call_count += 1
        self.actions.append(action)

        index = min(self.call_count - 1, len(self.script) - 1)
        result = self.script[index]
        if isinstance(result, BaseException):
            raise result
        return result


class BlockingGenerationProvider(IGenerationProvider):
    """Generation that waits until released, for concurrency tests."""

    def __init__(self, response: str = "Test message"):
        self.response = response
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.call_count = 0

    async def generate(
        self,
        action: EngagementAction,
        scope_id: str,
        channel: IChannel
    ) -> Optional[str]:
        self.call_count += 1
        self.started.set()
        await self.release.wait()
        return self.response


class FixedRandom:
    """Stand-in for random.Random with a fixed draw."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value

    def uniform(self, a: float, b: float) -> float:
        return a

    def choices(self, population, weights=None, k=1):
        return [population[0]] * k
