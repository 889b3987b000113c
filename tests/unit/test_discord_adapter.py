"""Tests for the discord.py platform wrappers."""

from types import SimpleNamespace

import pytest

from lull.core.config import DiscordConfig
from lull.integrations.discord_adapter import (
    DiscordChannel,
    DiscordCommunity,
    DiscordPlatformResolver,
)


def fake_channel(channel_id, position=0, can_send=True, me=True):
    guild = SimpleNamespace(me=SimpleNamespace(id=999) if me else None)
    return SimpleNamespace(
        id=channel_id,
        name=f"channel-{channel_id}",
        position=position,
        guild=guild,
        permissions_for=lambda member: SimpleNamespace(send_messages=can_send),
    )


def fake_guild(guild_id, channels):
    return SimpleNamespace(id=guild_id, name=f"guild-{guild_id}", text_channels=channels)


class FakeClient:
    def __init__(self, guilds, user_id=999):
        self.guilds = {g.id: g for g in guilds}
        self.user = SimpleNamespace(id=user_id)

    def get_guild(self, guild_id):
        return self.guilds.get(guild_id)


class TestDiscordChannel:

    def test_send_permission(self):
        assert DiscordChannel(fake_channel(1)).can_send()
        assert not DiscordChannel(fake_channel(1, can_send=False)).can_send()

    def test_no_member_means_no_send(self):
        assert not DiscordChannel(fake_channel(1, me=False)).can_send()

    def test_ids_are_strings(self):
        channel = DiscordChannel(fake_channel(42, position=3))

        assert channel.id == "42"
        assert channel.position == 3


class TestDiscordPlatformResolver:

    @pytest.fixture
    def guild(self):
        return fake_guild(1, [fake_channel(10), fake_channel(11)])

    async def test_unattached_client_resolves_nothing(self):
        resolver = DiscordPlatformResolver(DiscordConfig())

        assert resolver.bot_user_id is None
        assert await resolver.resolve_community("1") is None

    async def test_resolves_known_guild(self, guild):
        resolver = DiscordPlatformResolver(DiscordConfig(), FakeClient([guild]))

        community = await resolver.resolve_community("1")

        assert isinstance(community, DiscordCommunity)
        assert community.id == "1"
        assert [c.id for c in community.text_channels()] == ["10", "11"]
        assert resolver.bot_user_id == "999"

    async def test_unknown_or_invalid_guild(self, guild):
        resolver = DiscordPlatformResolver(DiscordConfig(), FakeClient([guild]))

        assert await resolver.resolve_community("2") is None
        assert await resolver.resolve_community("not-a-number") is None

    async def test_allowed_guilds_filter(self, guild):
        config = DiscordConfig(allowed_guilds=["5"])
        resolver = DiscordPlatformResolver(config, FakeClient([guild]))

        assert await resolver.resolve_community("1") is None

    def test_primary_channel_per_guild(self, guild):
        config = DiscordConfig(primary_channel_id="10", primary_channels={"1": "11"})
        resolver = DiscordPlatformResolver(config)

        assert resolver.primary_channel_for(guild) == "11"

    def test_global_primary_channel_only_if_present(self, guild):
        resolver = DiscordPlatformResolver(DiscordConfig(primary_channel_id="10"))
        other = fake_guild(2, [fake_channel(20)])

        assert resolver.primary_channel_for(guild) == "10"
        assert resolver.primary_channel_for(other) is None
