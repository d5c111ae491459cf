"""
MIT License

Copyright (c) 2019-Present Jake Sichley

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""

from functools import partial

import discord
from discord import app_commands
from discord.app_commands import Transform
from discord.ext import commands

from rolebot import RoleBot
from utils.interaction import GuildInteraction
from utils.logging_formatter import bot_logger
from utils.role_grants import ReactionEvent
from utils.transformers import EmojiOption, RoleNameOption


class ReactionRoles(commands.Cog):
    """
    A Cogs class that implements the guild's reaction-role message.

    Every command and reaction event is handled through the bot's event queue, under the guild's lock.

    Attributes:
        bot (RoleBot): The Discord bot.
    """

    def __init__(self, bot: RoleBot) -> None:
        """
        The constructor for the ReactionRoles class.

        Parameters:
            bot (RoleBot): The Discord bot.
        """

        self.bot = bot

    """
    MARK: - App Commands
    """

    @app_commands.command(name='addrole', description='Add a role mapping')
    @app_commands.describe(emoji='The emoji for the role', role_name='The name of the role')
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def add_role(
            self,
            interaction: GuildInteraction,
            emoji: Transform[str, EmojiOption],
            role_name: Transform[str, RoleNameOption]
    ) -> None:
        """
        Maps an emoji to a role, creating the role if necessary.

        Parameters:
            interaction (GuildInteraction): The invocation interaction.
            emoji (str): The emoji for the role.
            role_name (str): The name of the role.

        Returns:
            None.
        """

        await interaction.response.defer(thinking=True, ephemeral=True)
        response = await self.bot.event_queue.submit(
            interaction.guild_id,
            partial(self.bot.role_commands.add_mapping, interaction.guild, emoji, role_name),
            name='addrole'
        )
        await interaction.followup.send(response)

    @app_commands.command(name='removerole', description='Remove a role mapping')
    @app_commands.describe(emoji='The emoji of the role mapping to remove')
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def remove_role(self, interaction: GuildInteraction, emoji: Transform[str, EmojiOption]) -> None:
        """
        Removes an emoji's role mapping.

        Parameters:
            interaction (GuildInteraction): The invocation interaction.
            emoji (str): The emoji of the mapping.

        Returns:
            None.
        """

        await interaction.response.defer(thinking=True, ephemeral=True)
        response = await self.bot.event_queue.submit(
            interaction.guild_id,
            partial(self.bot.role_commands.remove_mapping, interaction.guild, emoji),
            name='removerole'
        )
        await interaction.followup.send(response)

    @app_commands.command(name='listroles', description='List all role mappings')
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def list_roles(self, interaction: GuildInteraction) -> None:
        """
        Lists the guild's role mappings.

        Parameters:
            interaction (GuildInteraction): The invocation interaction.

        Returns:
            None.
        """

        async def list_mappings() -> str:
            return self.bot.role_commands.list_mappings(interaction.guild_id)

        await interaction.response.defer(thinking=True, ephemeral=True)
        response = await self.bot.event_queue.submit(interaction.guild_id, list_mappings, name='listroles')
        await interaction.followup.send(response)

    @app_commands.command(name='setchannel', description='Create a message for role selection')
    @app_commands.describe(channel_id='The ID of the channel to post the message in')
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def set_channel(self, interaction: GuildInteraction, channel_id: str) -> None:
        """
        Posts a new reaction-role message in the specified channel.

        Parameters:
            interaction (GuildInteraction): The invocation interaction.
            channel_id (str): The id of the channel.

        Returns:
            None.
        """

        # an invalid channel is answered ephemerally, before deferring
        self.bot.role_commands.resolve_channel(interaction.guild, channel_id)

        await interaction.response.defer(thinking=True, ephemeral=True)
        response = await self.bot.event_queue.submit(
            interaction.guild_id,
            partial(self.bot.role_commands.designate_channel, interaction.guild, channel_id),
            name='setchannel'
        )
        await interaction.followup.send(response)

    """
    MARK: - Listeners
    """

    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        """
        A listener method that is called whenever a reaction is added.
        'raw' events fire regardless of whether a message is cached.

        Parameters:
            payload (discord.RawReactionActionEvent): Represents a payload for a raw reaction event.

        Returns:
            None.
        """

        await self.handle_reaction(payload)

    @commands.Cog.listener()
    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent) -> None:
        """
        A listener method that is called whenever a reaction is removed.
        'raw' events fire regardless of whether a message is cached.

        Parameters:
            payload (discord.RawReactionActionEvent): Represents a payload for a raw reaction event.

        Returns:
            None.
        """

        await self.handle_reaction(payload)

    async def handle_reaction(self, payload: discord.RawReactionActionEvent) -> None:
        """
        Queues a raw reaction event for the role grant service.

        Parameters:
            payload (discord.RawReactionActionEvent): Represents a payload for a raw reaction event.

        Returns:
            None.
        """

        member = None

        # removal payloads never carry a member
        if payload.member is None and payload.guild_id is not None and (guild := self.bot.get_guild(payload.guild_id)):
            member = guild.get_member(payload.user_id)

        if (event := ReactionEvent.from_payload(payload, member)) is None:
            return

        await self.bot.event_queue.submit(
            event.guild_id, partial(self.bot.role_grants.handle, event), name=f'{event.event_type.value} event'
        )


async def setup(bot: RoleBot) -> None:
    """
    A setup function that allows the cog to be treated as an extension.

    Parameters:
        bot (RoleBot): The bot the cog should be added to.

    Returns:
        None.
    """

    await bot.add_cog(ReactionRoles(bot))
    bot_logger.info('Completed Setup for Cog: ReactionRoles')
