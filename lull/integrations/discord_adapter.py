"""Discord integration adapter."""

import discord
import logging
from typing import List, Optional

from lull.core.config import DiscordConfig
from lull.core.events import MessageReceived
from lull.core.interfaces import IChannel, ICommunityHandle, IPlatformResolver
from lull.core.orchestrator import Orchestrator
from lull.engagement.engine import EngagementEngine
from lull.engagement.mentions import MentionDetector

logger = logging.getLogger(__name__)


class DiscordChannel(IChannel):
    """Text channel wrapper with the bot's send permission."""

    def __init__(self, channel: discord.TextChannel):
        self._channel = channel

    @property
    def id(self) -> str:
        return str(self._channel.id)

    @property
    def name(self) -> str:
        return self._channel.name

    @property
    def position(self) -> int:
        return self._channel.position

    def can_send(self) -> bool:
        me = self._channel.guild.me
        if me is None:
            return False
        return self._channel.permissions_for(me).send_messages

    async def send(self, content: str) -> None:
        await self._channel.send(content)


class DiscordCommunity(ICommunityHandle):
    """Guild wrapper exposing its text channels."""

    def __init__(self, guild: discord.Guild, primary_channel_id: Optional[str] = None):
        self._guild = guild
        self._primary_channel_id = primary_channel_id

    @property
    def id(self) -> str:
        return str(self._guild.id)

    @property
    def name(self) -> str:
        return self._guild.name

    @property
    def primary_channel_id(self) -> Optional[str]:
        return self._primary_channel_id

    def text_channels(self) -> List[IChannel]:
        return [DiscordChannel(channel) for channel in self._guild.text_channels]


class DiscordPlatformResolver(IPlatformResolver):
    """Resolves guild ids through a connected discord.py client."""

    def __init__(self, config: DiscordConfig, client: Optional[discord.Client] = None):
        self.config = config
        self.client = client

    def attach(self, client: discord.Client) -> None:
        self.client = client

    @property
    def bot_user_id(self) -> Optional[str]:
        if self.client is None or self.client.user is None:
            return None
        return str(self.client.user.id)

    def primary_channel_for(self, guild: discord.Guild) -> Optional[str]:
        """Per-guild primary channel, falling back to the global one if it lives here."""
        configured = self.config.primary_channels.get(str(guild.id))
        if configured:
            return str(configured)

        global_id = self.config.primary_channel_id
        if global_id and any(str(c.id) == str(global_id) for c in guild.text_channels):
            return str(global_id)
        return None

    async def resolve_community(self, scope_id: str) -> Optional[ICommunityHandle]:
        if self.client is None:
            logger.warning("Discord client not attached yet")
            return None

        if self.config.allowed_guilds and scope_id not in self.config.allowed_guilds:
            logger.debug(f"Guild {scope_id} not in allowed guilds")
            return None

        try:
            guild = self.client.get_guild(int(scope_id))
        except ValueError:
            logger.error(f"Invalid guild ID: {scope_id}")
            return None

        if guild is None:
            logger.warning(f"Guild {scope_id} not found")
            return None

        return DiscordCommunity(guild, self.primary_channel_for(guild))


class DiscordAdapter(discord.Client):
    """Discord bot feeding guild messages to the orchestrator."""

    def __init__(
        self,
        config: DiscordConfig,
        orchestrator: Orchestrator,
        engine: Optional[EngagementEngine] = None,
        resolver: Optional[DiscordPlatformResolver] = None,
        mentions: Optional[MentionDetector] = None
    ):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        super().__init__(intents=intents)

        self.config = config
        self.orchestrator = orchestrator
        self.engine = engine
        self.mentions = mentions or MentionDetector(orchestrator.config.persona.name)
        self.resolver = resolver or DiscordPlatformResolver(config)
        self.resolver.attach(self)

        logger.info("Discord adapter initialized")

    async def on_ready(self):
        """Called when bot is ready."""
        logger.info(f"Discord bot connected as {self.user} ({len(self.guilds)} guilds)")

        if self.engine and not self.engine.is_running:
            await self.engine.start()

    def _is_addressed(self, message: discord.Message) -> bool:
        if self.user and self.user in message.mentions:
            return True
        return self.mentions.mentions_bot(message.content, self.resolver.bot_user_id)

    def _build_event(self, message: discord.Message) -> MessageReceived:
        author = message.author
        permissions = getattr(author, "guild_permissions", None)
        is_admin = bool(permissions and permissions.manage_guild)

        return MessageReceived(
            scope_id=str(message.guild.id),
            user_id=str(author.id),
            user_name=author.display_name,
            content=message.content,
            channel_id=str(message.channel.id),
            addressed_to_bot=self._is_addressed(message),
            is_self=author == self.user,
            metadata={"is_admin": is_admin, "is_bot": author.bot}
        )

    async def on_message(self, message: discord.Message):
        """Handle incoming Discord message."""
        if message.guild is None:
            return

        if self.config.allowed_guilds and str(message.guild.id) not in self.config.allowed_guilds:
            return

        # Other bots would drive each other's activity levels
        if message.author.bot and message.author != self.user:
            return

        event = self._build_event(message)
        reply = await self.orchestrator.handle_message(event)

        if reply:
            try:
                await message.channel.send(reply)
            except discord.errors.HTTPException as e:
                logger.error(f"Failed to send command reply: {e}")

    async def close(self):
        if self.engine:
            await self.engine.stop()
        await super().close()
