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

from typing import List

import discord

from utils.checks import (
    MissingMappingInput, NoRoleMappings, RoleChannelNotFound, RoleMessageUnavailable, RoleUnavailable
)
from utils.emoji_utils import normalize_emoji
from utils.logging_formatter import bot_logger
from utils.reconciler import MessageReconciler, ReactionOutcome, render_role_message
from utils.role_provisioner import RoleProvisioner
from utils.role_store import RoleStore, RoleMessageReference


class RoleMappingCommands:
    """
    The administrator operations for reaction roles, independent of how they're invoked.
    Each operation returns the response for the invoker, or raises InvocationCheckFailure before modifying any state.

    Attributes:
        store (RoleStore): The mapping store.
        provisioner (RoleProvisioner): Resolves role names to roles.
        reconciler (MessageReconciler): Keeps role messages in line with their mappings.
    """

    def __init__(self, store: RoleStore, provisioner: RoleProvisioner, reconciler: MessageReconciler) -> None:
        """
        The constructor for the RoleMappingCommands class.

        Parameters:
            store (RoleStore): The mapping store.
            provisioner (RoleProvisioner): Resolves role names to roles.
            reconciler (MessageReconciler): Keeps role messages in line with their mappings.
        """

        self.store = store
        self.provisioner = provisioner
        self.reconciler = reconciler

    async def add_mapping(self, guild: discord.Guild, emoji: str, role_name: str) -> str:
        """
        Maps an emoji to a role, creating the role if it doesn't exist, and refreshes the role message.

        Parameters:
            guild (discord.Guild): The guild.
            emoji (str): The emoji token.
            role_name (str): The name of the role.

        Returns:
            (str): The response.
        """

        emoji, role_name = emoji.strip(), role_name.strip()

        if not emoji or not role_name:
            raise MissingMappingInput()

        emoji = normalize_emoji(emoji)

        try:
            role = await self.provisioner.ensure_role(guild, role_name)
        except discord.HTTPException as e:
            bot_logger.error(f'Reaction Role - Role creation failed for {role_name}. {e.status}. {e.text}')
            raise RoleUnavailable(role_name)

        await self.store.set(guild.id, emoji, role.name)
        bot_logger.info(f'Role mapping added: {emoji} -> {role.name} [Guild ID: {guild.id}]')

        await self.refresh_message(guild.id)

        return f'Role mapping added: {emoji} -> {role.name}'

    async def remove_mapping(self, guild: discord.Guild, emoji: str) -> str:
        """
        Removes an emoji's mapping and refreshes the role message.

        Parameters:
            guild (discord.Guild): The guild.
            emoji (str): The emoji token.

        Returns:
            (str): The response.
        """

        emoji = normalize_emoji(emoji)

        if not await self.store.remove(guild.id, emoji):
            bot_logger.info(f'Role mapping not found for emoji: {emoji} [Guild ID: {guild.id}]')
            return 'Role mapping not found.'

        bot_logger.info(f'Role mapping removed for emoji: {emoji} [Guild ID: {guild.id}]')
        await self.refresh_message(guild.id)

        return f'Role mapping removed for emoji: {emoji}'

    def list_mappings(self, guild_id: int) -> str:
        """
        Lists the guild's mappings.

        Parameters:
            guild_id (int): The id of the guild.

        Returns:
            (str): The response.
        """

        mapping = self.store.get(guild_id)

        if not mapping:
            return 'No role mappings set up.'

        lines = ['Current role mappings:']
        lines.extend(f'{emoji} -> {role_name}' for emoji, role_name in mapping.items())
        return '\n'.join(lines)

    async def designate_channel(self, guild: discord.Guild, channel_id: str) -> str:
        """
        Posts a new role message in the specified channel and makes it the guild's role message.
        The previous role message, if any, is left in place.

        Parameters:
            guild (discord.Guild): The guild.
            channel_id (str): The id of the channel to post in.

        Returns:
            (str): The response.
        """

        channel = self.resolve_channel(guild, channel_id)
        mapping = self.store.get(guild.id)

        if not mapping:
            raise NoRoleMappings()

        try:
            message = await channel.send(render_role_message(mapping))  # type: ignore[attr-defined]
        except discord.HTTPException as e:
            bot_logger.warning(f'Reaction Role - Role message creation failed. {e.status}. {e.text}')
            raise RoleMessageUnavailable(channel.id)

        await self.reconciler.add_reactions(message, mapping)
        await self.store.set_message_ref(guild.id, RoleMessageReference(channel_id=channel.id, message_id=message.id))
        bot_logger.info(f'Role selection message created [Guild ID: {guild.id}, Message ID: {message.id}]')

        return f'Role selection message created in <#{channel.id}>.'

    @staticmethod
    def resolve_channel(guild: discord.Guild, channel_id: str) -> discord.abc.GuildChannel:
        """
        Finds a channel of the guild that messages can be sent in.

        Parameters:
            guild (discord.Guild): The guild.
            channel_id (str): The id of the channel.

        Raises:
            RoleChannelNotFound: No such channel exists.

        Returns:
            (discord.abc.GuildChannel): The channel.
        """

        channel_id = channel_id.strip()
        channel = discord.utils.find(lambda c: str(c.id) == channel_id, guild.channels)

        if channel is None or not isinstance(channel, discord.abc.Messageable):
            raise RoleChannelNotFound(channel_id)

        return channel

    async def refresh_message(self, guild_id: int) -> List[ReactionOutcome]:
        """
        Reconciles the guild's role message with its mapping, if the guild has a role message.

        Parameters:
            guild_id (int): The id of the guild.

        Returns:
            (List[ReactionOutcome]): The outcome of every reaction call that was attempted.
        """

        if (reference := self.store.get_message_ref(guild_id)) is None:
            return []

        if (message := await self.reconciler.fetch_message(reference)) is None:
            return []

        return await self.reconciler.reconcile(message, self.store.get(guild_id))
