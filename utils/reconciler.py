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
from typing import Dict, List, Optional, Iterable, Awaitable, Callable, Any

import discord

from utils.emoji_utils import emoji_key, normalize_emoji
from utils.logging_formatter import bot_logger
from utils.role_store import RoleMessageReference

ROLE_MESSAGE_HEADER = 'React for roles:'


class ReactionAction(Enum):
    """
    The kind of reaction call attempted on a role message.
    """

    ADD = 'add'
    REMOVE = 'remove'


@dataclass
class ReactionOutcome:
    """
    The result of a single reaction call made during reconciliation.

    Attributes:
        emoji (str): The emoji token.
        action (ReactionAction): Whether the reaction was being added or removed.
        succeeded (bool): Whether the call succeeded.
        error (Optional[str]): The failure description, if the call failed.
    """

    emoji: str
    action: ReactionAction
    succeeded: bool
    error: Optional[str] = None


def render_role_message(mapping: Dict[str, str]) -> str:
    """
    Renders the body of a reaction-role message. Entries are listed in the mapping's insertion order.

    Parameters:
        mapping (Dict[str, str]): The guild's emoji -> role name mapping.

    Returns:
        (str): The message body.
    """

    lines = [ROLE_MESSAGE_HEADER, '']
    lines.extend(f'{emoji} - {role_name}' for emoji, role_name in mapping.items())
    return '\n'.join(lines)


class MessageReconciler:
    """
    Brings a reaction-role message in line with its guild's mapping.

    Only the bot's own reactions are ever removed. Every reaction call is attempted independently; failures are logged
    and reported in the returned outcomes, never retried.

    Attributes:
        client (discord.Client): The Discord client.
    """

    def __init__(self, client: discord.Client) -> None:
        """
        The constructor for the MessageReconciler class.

        Parameters:
            client (discord.Client): The Discord client.
        """

        self.client = client

    async def fetch_message(self, reference: RoleMessageReference) -> Optional[discord.Message]:
        """
        Fetches the live message for a reference. A reference whose channel or message no longer exists is logged and
        left as-is.

        Parameters:
            reference (RoleMessageReference): The role message reference.

        Returns:
            (Optional[discord.Message]): The message, if it could be fetched.
        """

        try:
            channel = self.client.get_channel(reference.channel_id) or await self.client.fetch_channel(
                reference.channel_id
            )

            if not isinstance(channel, discord.abc.Messageable):
                bot_logger.warning(f'Role message channel is not messageable. [Channel ID: {reference.channel_id}]')
                return None

            return await channel.fetch_message(reference.message_id)
        except discord.HTTPException as e:
            bot_logger.warning(
                f'Failed to fetch role message [Channel ID: {reference.channel_id}, '
                f'Message ID: {reference.message_id}]. {e.status}. {e.text}'
            )
            return None

    async def reconcile(self, message: discord.Message, mapping: Dict[str, str]) -> List[ReactionOutcome]:
        """
        Rewrites the message body and repairs its reactions to match the mapping.

        Reactions on the message that aren't mapped are withdrawn if they're the bot's own; mapped emoji with no
        reaction on the message are added. Running this twice without outside interference makes no calls the second
        time.

        Parameters:
            message (discord.Message): The reaction-role message.
            mapping (Dict[str, str]): The guild's emoji -> role name mapping.

        Returns:
            (List[ReactionOutcome]): The outcome of every reaction call that was attempted.
        """

        content = render_role_message(mapping)

        if message.content != content:
            try:
                await message.edit(content=content)
            except discord.NotFound as e:
                bot_logger.warning(f'Role message no longer exists [Message ID: {message.id}]. {e.status}. {e.text}')
                return []
            except discord.HTTPException as e:
                bot_logger.warning(f'Role message edit failed [Message ID: {message.id}]. {e.status}. {e.text}')

        current_reactions = {emoji_key(reaction.emoji): reaction for reaction in message.reactions}
        mapped = {emoji_key(emoji) for emoji in mapping}
        to_remove = [reaction for key, reaction in current_reactions.items() if key not in mapped]
        to_add = [emoji for emoji in mapping if emoji_key(emoji) not in current_reactions]

        outcomes: List[ReactionOutcome] = []

        for reaction in to_remove:
            # reactions from other users are left alone; only the bot's own can be withdrawn
            if not reaction.me:
                continue

            outcomes.append(await self._attempt(
                normalize_emoji(reaction.emoji), ReactionAction.REMOVE, message.remove_reaction, reaction.emoji,
                self.client.user
            ))

        outcomes.extend(await self.add_reactions(message, to_add))

        bot_logger.info(
            f'Reconciled role message [Message ID: {message.id}]: {len(to_add)} to add, {len(to_remove)} to remove, '
            f'{sum(not outcome.succeeded for outcome in outcomes)} failed.'
        )

        return outcomes

    async def add_reactions(self, message: discord.Message, emojis: Iterable[str]) -> List[ReactionOutcome]:
        """
        Adds a reaction for each emoji, one at a time.

        Parameters:
            message (discord.Message): The message to react to.
            emojis (Iterable[str]): The emoji tokens to react with.

        Returns:
            (List[ReactionOutcome]): The outcome of every reaction call.
        """

        return [await self._attempt(emoji, ReactionAction.ADD, message.add_reaction, emoji) for emoji in emojis]

    @staticmethod
    async def _attempt(
            emoji: str, action: ReactionAction, call: Callable[..., Awaitable[Any]], *args: Any
    ) -> ReactionOutcome:
        """
        Makes a single reaction call, converting a failure into a failed outcome.

        Parameters:
            emoji (str): The emoji token.
            action (ReactionAction): The kind of call being made.
            call (Callable[..., Awaitable[Any]]): The reaction method.
            args (Any): The arguments for the reaction method.

        Returns:
            (ReactionOutcome).
        """

        try:
            await call(*args)
        except discord.HTTPException as e:
            bot_logger.warning(f'Reaction Role - Reaction {action.value} failed for {emoji}. {e.status}. {e.text}')
            return ReactionOutcome(emoji, action, False, f'{e.status}. {e.text}')

        return ReactionOutcome(emoji, action, True)
