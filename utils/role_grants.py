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

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import discord

from utils.emoji_utils import match_emoji, normalize_emoji
from utils.logging_formatter import bot_logger
from utils.role_provisioner import RoleProvisioner
from utils.role_store import RoleStore


class ReactionEventType(Enum):
    """
    The kind of inbound reaction event. Values match discord.py's raw event types.
    """

    ADD = 'REACTION_ADD'
    REMOVE = 'REACTION_REMOVE'


class GuardResult(Enum):
    """
    The classification of an inbound reaction event.
    Every value other than `ACCEPTED` discards the event without side effects.
    """

    ACCEPTED = 'accepted'
    NO_ROLE_MESSAGE = 'no role message'
    MESSAGE_MISMATCH = 'message mismatch'
    UNMAPPED_EMOJI = 'unmapped emoji'
    SELF_REACTION = 'self reaction'


@dataclass
class ReactionEvent:
    """
    A guild reaction event, independent of whether the message is cached.

    Attributes:
        event_type (ReactionEventType): Whether the reaction was added or removed.
        guild_id (int): The guild id of the reaction.
        channel_id (int): The channel id of the reaction.
        message_id (int): The message id of the reaction.
        emoji (str): The emoji token of the reaction.
        user_id (int): The id of the user that reacted.
        user_is_bot (bool): Whether the user is a bot account.
        member (Optional[discord.Member]): The member that reacted, if known.
    """

    event_type: ReactionEventType
    guild_id: int
    channel_id: int
    message_id: int
    emoji: str
    user_id: int
    user_is_bot: bool = False
    member: Optional[discord.Member] = None

    @classmethod
    def from_payload(
            cls, payload: discord.RawReactionActionEvent, member: Optional[discord.Member] = None
    ) -> Optional['ReactionEvent']:
        """
        Creates a ReactionEvent from a raw reaction payload.

        Parameters:
            payload (discord.RawReactionActionEvent): The raw reaction payload.
            member (Optional[discord.Member]): The reacting member, for payloads that don't carry one.

        Returns:
            (Optional[ReactionEvent]): The event, or None if the reaction didn't happen in a guild.
        """

        if payload.guild_id is None:
            return None

        member = payload.member or member

        return cls(
            ReactionEventType(payload.event_type),
            payload.guild_id,
            payload.channel_id,
            payload.message_id,
            normalize_emoji(payload.emoji),
            payload.user_id,
            member.bot if member is not None else False,
            member
        )


class RoleGrantService:
    """
    Grants and revokes roles in response to reactions on a guild's reaction-role message.

    Granting creates a missing role; revoking never does, and a missing role is only logged.

    Attributes:
        client (discord.Client): The Discord client.
        store (RoleStore): The mapping store. Only read.
        provisioner (RoleProvisioner): Resolves role names to roles.
    """

    GRANTED = "You've been granted the {} role!"
    GRANT_FAILED = 'There was an error granting the {} role.'
    REVOKED = "You've been removed from the {} role."

    def __init__(self, client: discord.Client, store: RoleStore, provisioner: RoleProvisioner) -> None:
        """
        The constructor for the RoleGrantService class.

        Parameters:
            client (discord.Client): The Discord client.
            store (RoleStore): The mapping store.
            provisioner (RoleProvisioner): Resolves role names to roles.
        """

        self.client = client
        self.store = store
        self.provisioner = provisioner

    def classify(self, event: ReactionEvent) -> Tuple[GuardResult, Optional[str]]:
        """
        Runs an event through the guards, in order.

        Parameters:
            event (ReactionEvent): The reaction event.

        Returns:
            (Tuple[GuardResult, Optional[str]]): The classification and, if accepted, the mapped role name.
        """

        reference = self.store.get_message_ref(event.guild_id)

        if reference is None:
            return GuardResult.NO_ROLE_MESSAGE, None

        if reference.message_id != event.message_id:
            return GuardResult.MESSAGE_MISMATCH, None

        mapping = self.store.get(event.guild_id)
        token = match_emoji(mapping, event.emoji)
        role_name = mapping.get(token) if token is not None else None

        if role_name is None:
            return GuardResult.UNMAPPED_EMOJI, None

        bot_user = self.client.user

        if event.user_is_bot or (bot_user is not None and event.user_id == bot_user.id):
            return GuardResult.SELF_REACTION, None

        return GuardResult.ACCEPTED, role_name

    async def handle(self, event: ReactionEvent) -> GuardResult:
        """
        Classifies an event and, if accepted, grants or revokes the mapped role.

        Parameters:
            event (ReactionEvent): The reaction event.

        Returns:
            (GuardResult): The classification of the event.
        """

        result, role_name = self.classify(event)

        if result is not GuardResult.ACCEPTED or role_name is None:
            bot_logger.debug(f'Discarded reaction event [Message ID: {event.message_id}]: {result.value}.')
            return result

        guild = self.client.get_guild(event.guild_id)

        if guild is None:
            bot_logger.warning(f'Reaction Role - Guild unavailable [Guild ID: {event.guild_id}].')
            return result

        if event.event_type is ReactionEventType.ADD:
            await self.grant(guild, event, role_name)
        else:
            await self.revoke(guild, event, role_name)

        return result

    async def grant(self, guild: discord.Guild, event: ReactionEvent, role_name: str) -> None:
        """
        Grants the mapped role to the reacting member, creating the role if necessary, and notifies them.

        Parameters:
            guild (discord.Guild): The guild of the event.
            event (ReactionEvent): The reaction event.
            role_name (str): The mapped role name.

        Returns:
            None.
        """

        member = await self.resolve_member(guild, event)

        if member is None:
            return

        try:
            role = await self.provisioner.ensure_role(guild, role_name)
            await member.add_roles(role, reason=f'Reaction Roles - Add [Message ID: {event.message_id}]')
        except discord.HTTPException as e:
            bot_logger.error(f'Reaction Role - Error granting role {role_name} to {member}. {e.status}. {e.text}')
            await self.notify(member, self.GRANT_FAILED.format(role_name))
            return

        bot_logger.info(f'Role {role_name} granted to user {member} [Guild ID: {guild.id}]')
        await self.notify(member, self.GRANTED.format(role_name))

    async def revoke(self, guild: discord.Guild, event: ReactionEvent, role_name: str) -> None:
        """
        Revokes the mapped role from the reacting member and notifies them. A missing role is never created.

        Parameters:
            guild (discord.Guild): The guild of the event.
            event (ReactionEvent): The reaction event.
            role_name (str): The mapped role name.

        Returns:
            None.
        """

        role = self.provisioner.find_role(guild, role_name)

        if role is None:
            bot_logger.info(f'Role {role_name} not found for removal [Guild ID: {guild.id}]')
            return

        member = await self.resolve_member(guild, event)

        if member is None:
            return

        try:
            await member.remove_roles(role, reason=f'Reaction Roles - Remove [Message ID: {event.message_id}]')
        except discord.HTTPException as e:
            bot_logger.error(f'Reaction Role - Error removing role {role_name} from {member}. {e.status}. {e.text}')
            return

        bot_logger.info(f'Removed role {role_name} from user {member} [Guild ID: {guild.id}]')
        await self.notify(member, self.REVOKED.format(role_name))

    @staticmethod
    async def resolve_member(guild: discord.Guild, event: ReactionEvent) -> Optional[discord.Member]:
        """
        Resolves the reacting member from the event, the guild's cache, or the API, in that order.

        Parameters:
            guild (discord.Guild): The guild of the event.
            event (ReactionEvent): The reaction event.

        Returns:
            (Optional[discord.Member]): The member, if they could be resolved.
        """

        if member := event.member or guild.get_member(event.user_id):
            return member

        try:
            return await guild.fetch_member(event.user_id)
        except discord.HTTPException as e:
            bot_logger.warning(f'Reaction Role - Failed to fetch member {event.user_id}. {e.status}. {e.text}')
            return None

    @staticmethod
    async def notify(member: discord.Member, content: str) -> None:
        """
        Sends a direct message to a member. Members that don't accept direct messages are skipped.

        Parameters:
            member (discord.Member): The member to notify.
            content (str): The message content.

        Returns:
            None.
        """

        try:
            await member.send(content)
        except discord.HTTPException as e:
            bot_logger.warning(f'Reaction Role - Failed to notify {member}. {e.status}. {e.text}')
